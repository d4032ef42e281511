"""IRC relay that converts each direction between the line protocol and JSON.

The STARTJSON command signals that the remainder of the stream in that
direction is JSON.
"""

__version__ = "0.1.0"
