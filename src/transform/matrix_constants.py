# Decimal places kept when rendering a matrix as an SVG transform expression.
SVG_PRECISION = 3

# Significant digits used when printing matrix components (matches ostream defaults).
FORMAT_SIGNIFICANT_DIGITS = 6

# Calculator variables that define the default rotation center of the 'R' command:
# cx = ux + w/2, cy = uy + h/2
VAR_UX = "ux"
VAR_UY = "uy"
VAR_WIDTH = "w"
VAR_HEIGHT = "h"
CENTER_VARIABLES = (VAR_UX, VAR_UY, VAR_WIDTH, VAR_HEIGHT)
