"""merge-or-pr: fast-forward a commit into a branch, or open a pull request
when the merge conflicts."""

__version__ = "0.1.0"
