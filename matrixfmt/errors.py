class MatrixError(Exception):
    """ Base-class for all matrix failures.
    Class-method helpers raise an instance of the calling class, e.g. `OutOfBounds.assert_true(...)`. """

    @classmethod
    def assert_true(cls, cond, msg: str = ""):
        if not cond:
            raise cls(msg)

    @classmethod
    def assert_eq(cls, x, y, msg: str = ""):
        if x != y:
            raise cls(msg or f"{x!r} != {y!r}")


class OutOfBounds(MatrixError):
    """ Position outside the declared size """
    pass


class DimensionMismatch(MatrixError):
    """ Incompatible sizes or shapes """
    pass


class BandOverflow(MatrixError):
    """ Nonzero outside the positions a structured format can store """
    pass


class Overflow(MatrixError):
    """ Element-count arithmetic beyond the representable range """
    pass
