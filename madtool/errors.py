class MadError(Exception):
    """Base class for MAD archive errors."""


# Archive content
class CorruptArchive(MadError):
    pass


class TruncatedArchive(CorruptArchive):
    """The archive ends before a header or a data block is complete."""


# Lookup
class NotFound(MadError):
    def __init__(self, name: str):
        super().__init__(f"{name} not found in archive")
        self.name = name
