from numpy import sqrt

class Point:
    """
    Fixed position of a node in 3D euclidean space, all 3 coordinates floats
    """
    def __init__(self, x: float, y: float, z: float = 0.0):
        self.x = x
        self.y = y
        self.z = z

    def euclidean_distance(self, p2) -> float:
        """
        distance in meters between this point and a second point p2

        p2: another Point object
        """
        return float(sqrt((self.x - p2.x) ** 2 + (self.y - p2.y) ** 2 + (self.z - p2.z) ** 2))

    def as_tuple(self):
        return (self.x, self.y, self.z)

    def __eq__(self, other):
        if not isinstance(other, Point):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"Point(x={self.x}, y={self.y}, z={self.z})"
