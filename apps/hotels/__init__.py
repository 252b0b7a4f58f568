"""Hotels app: hotel catalog with the rooms each hotel owns."""
