"""Physical quantity wrappers used throughout the stage sizer.

Each quantity stores its value in SI units (kilograms, metres per second,
newtons, seconds). Same-kind quantities can be added, subtracted and
compared; any quantity can be scaled by a plain number. Dividing two
masses yields a dimensionless Ratio.
"""
import functools
import math


@functools.total_ordering
class _Quantity:
    """Base class for a float-backed physical quantity."""

    __slots__ = ('value',)
    unit = ''

    def __init__(self, value=0.0):
        self.value = float(value)

    def __float__(self):
        return self.value

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"

    def __str__(self):
        return f"{self.value:.2f} {self.unit}".rstrip()

    def __hash__(self):
        return hash((type(self).__name__, self.value))

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.value < other.value

    def __add__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(self.value + other.value)

    def __sub__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(self.value - other.value)

    def __neg__(self):
        return type(self)(-self.value)

    def __mul__(self, factor):
        if isinstance(factor, _Quantity):
            return NotImplemented
        return type(self)(self.value * float(factor))

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, _Quantity):
            return NotImplemented
        return type(self)(self.value / float(other))

    def is_finite(self):
        return math.isfinite(self.value)


class Mass(_Quantity):
    """Mass in kilograms."""

    __slots__ = ()
    unit = 'kg'

    @classmethod
    def from_tonnes(cls, tonnes):
        return cls(tonnes * 1000.0)

    @property
    def kg(self):
        return self.value

    @property
    def tonnes(self):
        return self.value / 1000.0

    def __truediv__(self, other):
        if isinstance(other, Mass):
            return Ratio(self.value / other.value)
        return super().__truediv__(other)


class Velocity(_Quantity):
    """Velocity in metres per second."""

    __slots__ = ()
    unit = 'm/s'

    @classmethod
    def from_kmps(cls, kmps):
        return cls(kmps * 1000.0)

    @property
    def mps(self):
        return self.value

    @property
    def kmps(self):
        return self.value / 1000.0


class Force(_Quantity):
    """Force in newtons."""

    __slots__ = ()
    unit = 'N'

    @classmethod
    def from_kilonewtons(cls, kilonewtons):
        return cls(kilonewtons * 1000.0)

    @property
    def newtons(self):
        return self.value

    @property
    def kilonewtons(self):
        return self.value / 1000.0


class Isp(_Quantity):
    """Specific impulse in seconds."""

    __slots__ = ()
    unit = 's'

    @property
    def seconds(self):
        return self.value


class Time(_Quantity):
    """Duration in seconds."""

    __slots__ = ()
    unit = 's'

    @property
    def seconds(self):
        return self.value

    @property
    def minutes(self):
        return self.value / 60.0


class Ratio(_Quantity):
    """Dimensionless ratio."""

    __slots__ = ()

    def __str__(self):
        return f"{self.value:.3f}"
