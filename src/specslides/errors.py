from __future__ import annotations


class SpecslidesError(RuntimeError):
    pass


class NotFoundError(SpecslidesError):
    pass


class InvalidInputError(SpecslidesError):
    pass


class ScanError(SpecslidesError):
    pass


class SessionReadError(SpecslidesError):
    pass


class EmptyInputError(SpecslidesError):
    pass


class MalformedInputError(SpecslidesError):
    pass


class NoPromptsError(SpecslidesError):
    pass


class UploadError(SpecslidesError):
    pass
