"""Project workspace core.

Client-side model of a project's shared workspace: sections holding
attachments and items, with reactions and comments on items. State is
kept in memory and reconciled against the marketplace API.
"""

__version__ = "0.1.0"
