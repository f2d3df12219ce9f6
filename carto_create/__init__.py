"""carto-create -- scaffolding for CARTO apps (Angular, React, Vue)."""

__version__ = "0.1.0"
