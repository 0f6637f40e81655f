"""
Input events.

- keys: raw key constants produced by the keyboard reader
- keyboard: KeyboardReader task reading keys from the terminal
- input: Command set and InputHandler decoding keys into commands
"""
