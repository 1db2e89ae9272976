"""Workflow error types."""


class WorkflowError(Exception):
    """Base class for workflow engine errors."""


class StepExecutionError(WorkflowError):
    """A step could not be executed by its collaborator."""

    def __init__(self, step_id: str, message: str) -> None:
        super().__init__(message)
        self.step_id = step_id


class UnknownStepTypeError(StepExecutionError):
    """No executor is registered for the step's type tag."""

    def __init__(self, step_id: str, step_type: str) -> None:
        super().__init__(step_id, f"Unknown step type: {step_type}")
        self.step_type = step_type
