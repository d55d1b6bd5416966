"""Property console view core.

Client-side collection views (sort, group, select, paginate, duplicate)
over entities held by a persistence collaborator.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
