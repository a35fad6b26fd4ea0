"""Default locations for generated files, relative to the project root."""

GEN_ROOT = "gen"

DEFAULT_BASENAME = "sprites"
