class PlantCameraError(Exception):
    """
    Base class for all errors raised by plant camera components.
    """

    message: str

    def __init__(self, message: str, *args):
        super().__init__(message, *args)
        self.message = message

    def __str__(self) -> str:
        return self.message
