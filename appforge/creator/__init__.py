"""Creator -- materialises a new project from a profile chain.

Quick usage::

    from appforge.creator import CreateAppCommand, CreateAppRequest

    command = CreateAppCommand(config, repository)
    command.handle(CreateAppRequest(app_name="com.example.demo", features="json"))
"""

from appforge.creator.command import CreateAppCommand, CreateAppRequest, TargetProject
from appforge.creator.config_merger import ConfigMerger
from appforge.creator.dependencies import BuildBlocks, aggregate_build_blocks
from appforge.creator.identifiers import ProjectIdentifiers, derive_identifiers
from appforge.creator.materializer import SkeletonMaterializer
from appforge.creator.patcher import BuildDescriptorPatcher
from appforge.creator.variables import VariableContext, build_variables

__all__ = [
    "BuildBlocks",
    "BuildDescriptorPatcher",
    "ConfigMerger",
    "CreateAppCommand",
    "CreateAppRequest",
    "ProjectIdentifiers",
    "SkeletonMaterializer",
    "TargetProject",
    "VariableContext",
    "aggregate_build_blocks",
    "build_variables",
    "derive_identifiers",
]
