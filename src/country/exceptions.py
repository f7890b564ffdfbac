class CountryError(Exception):
    pass


class InputError(CountryError):
    pass


class TargetCountError(CountryError):
    pass


class NoSolutionError(CountryError):
    pass


class FusionError(Exception):
    """Raised when a fusion would break the graph invariants."""
    pass
