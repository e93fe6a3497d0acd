from vectors import as_vec3


class Light:
    """Point light. Lights carry no color, only a brightness multiplier."""

    def __init__(self, position, intensity):
        self.position = as_vec3(position)
        self.intensity = float(intensity)
