from .base_workflow import BaseWorkflow, ConflictError, NotFoundError, WorkflowError
from .checkout_workflow import CheckoutWorkflow
from .enrollment_review_workflow import EnrollmentReviewWorkflow

__all__ = [
    'BaseWorkflow', 'WorkflowError', 'NotFoundError', 'ConflictError',
    'CheckoutWorkflow', 'EnrollmentReviewWorkflow',
]
