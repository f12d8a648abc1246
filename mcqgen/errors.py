class MCQGenError(Exception):
    """Base error for the MCQ generation service"""


class PrimaryResponseError(MCQGenError):
    """The external model answered, but not with usable MCQ records"""


class GenerationCancelled(MCQGenError):
    """The caller went away before a result was needed"""
