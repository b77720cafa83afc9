"""Exceptions raised while building or running a solution."""


class JudgeError(Exception):
    """Base class for errors that abort a run."""
    pass


class MissingSolutionFile(JudgeError):
    def __init__(self, path):
        super().__init__('Solution file not found at %s' % path)
        self.path = path


class BuildFailure(JudgeError):
    """The build command failed.  The captured diagnostic output is kept
    verbatim in the diagnostics attribute."""

    def __init__(self, message, diagnostics=''):
        if diagnostics:
            message = '%s\n%s' % (message, diagnostics)
        super().__init__(message)
        self.diagnostics = diagnostics


class MissingArtifact(BuildFailure):
    def __init__(self, path):
        super().__init__('Build succeeded but no artifact was found at %s' % path)
        self.path = path


class LaunchFailure(JudgeError):
    def __init__(self, argv, reason):
        super().__init__('Failed to launch %s: %s' % (' '.join(argv), reason))
        self.argv = argv
        self.reason = reason


class UnreadableTestCase(JudgeError):
    def __init__(self, path, reason):
        super().__init__('Cannot read test data %s: %s' % (path, reason))
        self.path = path
        self.reason = reason
