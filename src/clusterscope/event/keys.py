"""Raw key strings as read from a terminal in cbreak mode."""

ESC = "\x1b"
ENTER = ("\r", "\n")
UP = "\x1b[A"
DOWN = "\x1b[B"
RIGHT = "\x1b[C"
LEFT = "\x1b[D"
CTRL_C = "\x03"
CTRL_D = "\x04"
