from typing import Optional, Dict, Any
from datetime import datetime
import uuid
import logging
import sys
from pydantic import BaseModel, Field

from ..config import LOG_LEVEL

# Configure logging
logging.basicConfig(
    stream=sys.stdout,
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


class WorkflowError(Exception):
    """A workflow step refused to proceed; carries the HTTP status to report."""
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(WorkflowError):
    status_code = 404


class ConflictError(WorkflowError):
    status_code = 400


class WorkflowEvent(BaseModel):
    """Base class for workflow events"""
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    event_type: str
    event_data: Dict[str, Any] = {}


class WorkflowContext:
    """Context for storing workflow state"""
    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.events: list[WorkflowEvent] = []

    def add_event(self, event: WorkflowEvent):
        self.events.append(event)

    def get_events_by_type(self, event_type: str) -> list[WorkflowEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def set_data(self, key: str, value: Any):
        self.data[key] = value

    def get_data(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class BaseWorkflow:
    """Base class for all workflows"""

    def __init__(self, workflow_id: Optional[uuid.UUID] = None):
        self.workflow_id = workflow_id or uuid.uuid4()
        self.ctx = WorkflowContext()
        self.logger = logging.getLogger(f"{self.__class__.__name__}_{self.workflow_id}")

    def emit_event(self, event_type: str, event_data: Optional[Dict[str, Any]] = None):
        """Emit a workflow event"""
        event = WorkflowEvent(
            event_type=event_type,
            event_data=event_data or {}
        )
        self.ctx.add_event(event)
        self.logger.info(f"Event emitted: {event_type}")
        return event

    def handle_error(self, error: Exception, step: str):
        """Record a failed step"""
        error_event = self.emit_event(
            "error",
            {
                "error": str(error),
                "step": step,
            }
        )
        if isinstance(error, WorkflowError):
            self.logger.warning(f"Step {step} rejected: {error}")
        else:
            self.logger.exception(f"Error in step {step}: {error}")
        return error_event

    def run(self, *args, **kwargs):
        """Template method for workflow execution"""
        raise NotImplementedError("Workflow must implement run method")

    def __str__(self):
        return f"{self.__class__.__name__}(workflow_id={self.workflow_id})"
