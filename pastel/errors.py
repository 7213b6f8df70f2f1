"""
Exceptions raised by the paste store and service
"""


class PasteError(Exception):
    """Base class for all paste errors"""


class PasteNotFound(PasteError):
    def __init__(self, paste_id: str):
        self.paste_id = paste_id
        super().__init__(f"Paste {paste_id} does not exist")


class Unauthorized(PasteError):
    def __init__(self, paste_id: str):
        self.paste_id = paste_id
        super().__init__("Key is not valid")


class SizeExceeded(PasteError):
    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Pastes may not be more than {limit} bytes ({limit / 1048576:g} MB)")


class EmptyPaste(PasteError):
    def __init__(self):
        super().__init__("No paste data submitted")


class HighlightUnavailable(PasteError):
    def __init__(self, language: str):
        self.language = language
        super().__init__(f'Requested highlight "{language}" not available')


class StorageError(PasteError):
    """Underlying storage failure; not user-correctable, safe to retry"""


class PasteExists(StorageError):
    def __init__(self, paste_id: str):
        self.paste_id = paste_id
        super().__init__(f"Paste {paste_id} already exists")


class AllocationError(StorageError):
    pass


class ConfigError(Exception):
    """Invalid or missing configuration; fatal at startup"""
