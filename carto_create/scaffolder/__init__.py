"""carto-create scaffolder -- creates CARTO apps from template directories.

Quick usage::

    from carto_create.scaffolder import ProjectGenerator, ScriptedCollector

    generator = ProjectGenerator("/path/to/create-react")
    collector = ScriptedCollector({"title": "Demo", "accessToken": "abc123"})
    result = await generator.create_project("my-app", collector)
"""

from carto_create.scaffolder.collector import (
    PROJECT_FIELDS,
    ConfigCollector,
    FieldSpec,
    ProjectConfig,
    PromptCollector,
    ScriptedCollector,
)
from carto_create.scaffolder.generator import GenerationResult, ProjectGenerator
from carto_create.scaffolder.report import ReportRenderer

__all__ = [
    "PROJECT_FIELDS",
    "ConfigCollector",
    "FieldSpec",
    "GenerationResult",
    "ProjectConfig",
    "ProjectGenerator",
    "PromptCollector",
    "ReportRenderer",
    "ScriptedCollector",
]
