from dataclasses import dataclass
from typing import Any, Generator


@dataclass
class Point2f:
    x: float = 0.0
    y: float = 0.0

    def __iter__(self) -> Generator[float, Any, None]:
        yield self.x
        yield self.y

    def __getitem__(self, index: int) -> float:
        if index == 0:
            return self.x
        elif index == 1:
            return self.y
        else:
            raise IndexError("Point2f index out of range (0-1)")

    def copy(self) -> "Point2f":
        return Point2f(x=self.x, y=self.y)

    def __add__(self, other: "float | Point2f") -> "Point2f":
        if isinstance(other, Point2f):
            return Point2f(self.x + other.x, self.y + other.y)
        return Point2f(self.x + other, self.y + other)

    def __sub__(self, other: "float | Point2f") -> "Point2f":
        if isinstance(other, Point2f):
            return Point2f(self.x - other.x, self.y - other.y)
        return Point2f(self.x - other, self.y - other)

    def __mul__(self, other: "float | Point2f") -> "Point2f":
        if isinstance(other, Point2f):
            return Point2f(self.x * other.x, self.y * other.y)
        return Point2f(self.x * other, self.y * other)

    @property
    def length(self) -> float:
        return (self.x ** 2 + self.y ** 2) ** 0.5

    def normalized(self, epsilon: float = 1e-8) -> "Point2f":
        """Unit vector, or (0, 0) for vectors shorter than epsilon."""
        l = self.length
        if l < epsilon:
            return Point2f(0.0, 0.0)
        return Point2f(self.x / l, self.y / l)

    def dot(self, other: "Point2f") -> float:
        return self.x * other.x + self.y * other.y

    @classmethod
    def of(cls, value: "Point2f | tuple[float, float] | Any") -> "Point2f":
        """Accept a Point2f or any (x, y) pair."""
        if isinstance(value, Point2f):
            return value
        x, y = value
        return cls(float(x), float(y))
