class InvariantViolation(RuntimeError):
    """Raised when the engine reaches a state valid input can never produce."""
