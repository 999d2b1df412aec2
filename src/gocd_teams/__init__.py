"""gocd-teams — Microsoft Teams notifications for GoCD pipelines."""

__version__ = "0.1.0"
