"""The ``create-app`` command.

Drives the whole creation pipeline for one invocation:

1. resolve the profile and the selected features;
2. derive the project identifiers and the variable context;
3. overlay every profile in the chain (parents first), merging the
   application configuration after each pass;
4. overlay every selected feature and append its configuration fragment;
5. aggregate dependencies and plugins and patch the build descriptor.

Usage::

    command = CreateAppCommand(config, FileSystemProfileRepository(root))
    ok = command.handle(CreateAppRequest(app_name="com.example.demo"))

A failure part-way through leaves the partially populated directory in
place; nothing is rolled back.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from appforge.config import Config
from appforge.creator.config_merger import ConfigMerger
from appforge.creator.dependencies import aggregate_build_blocks
from appforge.creator.identifiers import ProjectIdentifiers, derive_identifiers
from appforge.creator.materializer import SkeletonMaterializer
from appforge.creator.patcher import BuildDescriptorPatcher
from appforge.creator.variables import VariableContext, build_variables
from appforge.errors import AppForgeError, ConfigurationUnset, ProfileNotFound
from appforge.profiles.models import Feature, Profile
from appforge.profiles.repository import ProfileRepository
from appforge.utils import print_error, print_success, print_summary_table, print_warning

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class CreateAppRequest(BaseModel):
    """Parsed user input for ``create-app``."""

    app_name: str | None = Field(default=None, description="[group.]app-name token")
    in_place: bool = Field(default=False, description="Create in the current directory")
    profile: str | None = Field(default=None, description="Profile name; None = default")
    features: str | None = Field(
        default=None, description="Comma-separated feature names; None = profile defaults"
    )
    verbose: bool = False

    @property
    def feature_names(self) -> list[str]:
        if not self.features:
            return []
        return [name.strip() for name in self.features.split(",") if name.strip()]


class TargetProject(BaseModel):
    """Where the new project lives and its key files."""

    model_config = ConfigDict(frozen=True)

    directory: Path
    app_name: str
    group_name: str
    application_config_path: Path
    build_descriptor_path: Path

    @classmethod
    def create(
        cls, config: Config, directory: Path, identifiers: ProjectIdentifiers
    ) -> "TargetProject":
        directory = directory.absolute()
        return cls(
            directory=directory,
            app_name=identifiers.app_name,
            group_name=identifiers.group_name,
            application_config_path=directory / config.application_config,
            build_descriptor_path=directory / config.build_descriptor,
        )


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


class CreateAppCommand:
    """Creates an application from a profile and optional features.

    Attributes:
        config: Global configuration (file names, binary extensions,
            default profile).
        repository: Resolves profiles.  Must be set before :meth:`handle`.
        working_dir: Directory new applications are created in; also the
            in-place target.  Defaults to the process's current directory.
    """

    NAME = "create-app"

    def __init__(
        self,
        config: Config | None = None,
        repository: ProfileRepository | None = None,
        working_dir: Path | None = None,
    ) -> None:
        self.config = config or Config()
        self.repository = repository
        self.working_dir = working_dir

    # -- Public API --------------------------------------------------------

    def handle(self, request: CreateAppRequest) -> bool:
        """Run the command.

        Returns:
            ``True`` on success.  On failure a diagnostic has been printed
            and ``False`` is returned.

        Raises:
            ConfigurationUnset: If no profile repository is configured.
        """
        if self.repository is None:
            raise ConfigurationUnset("repository")

        try:
            target = self.create(request)
        except AppForgeError as exc:
            print_error(str(exc))
            return False

        print_success(f"Application created at {target.directory}")
        return True

    def create(self, request: CreateAppRequest) -> TargetProject:
        """Run the pipeline and return the created project.

        Raises:
            AppForgeError: On any user-facing failure.
        """
        if self.repository is None:
            raise ConfigurationUnset("repository")

        profile_name = request.profile or self.config.default_profile
        profile = self.repository.get_profile(profile_name)
        if profile is None:
            raise ProfileNotFound(profile_name)
        features = self.evaluate_features(profile, request)

        working_dir = (self.working_dir or Path.cwd()).absolute()
        identifiers = derive_identifiers(
            request.app_name,
            in_place=request.in_place,
            current_dir_name=working_dir.name,
        )
        variables = build_variables(identifiers, profile.name)
        if request.verbose:
            print_summary_table(variables, title="Template variables")

        directory = working_dir if request.in_place else working_dir / identifiers.app_name
        target = TargetProject.create(self.config, directory, identifiers)

        chain = self.repository.get_profile_and_dependencies(profile)
        self.copy_skeletons(target, profile, chain, features, variables)

        blocks = aggregate_build_blocks(profile, features)
        BuildDescriptorPatcher(self.config).patch(target.directory, blocks, variables)
        return target

    # -- Pipeline steps ----------------------------------------------------

    def evaluate_features(self, profile: Profile, request: CreateAppRequest) -> list[Feature]:
        """The requested features, or the profile's defaults if none requested."""
        names = request.feature_names
        if not names:
            return profile.default_features
        selected, unknown = profile.select_features(names)
        for name in unknown:
            print_warning(f"Feature {name} does not exist in profile {profile.name}")
        return selected

    def copy_skeletons(
        self,
        target: TargetProject,
        profile: Profile,
        chain: list[Profile],
        features: list[Feature],
        variables: VariableContext,
    ) -> None:
        """Overlay every skeleton in order, growing the configuration file."""
        materializer = SkeletonMaterializer(self.config, target.directory, variables)
        merger = ConfigMerger(target.application_config_path)

        for participant in chain:
            previous = merger.capture()
            materializer.overlay_profile(profile, participant)
            merger.merge_after_overlay(previous)

        for feature in features:
            materializer.overlay_feature(profile, feature)
            merger.append_fragment(feature.skeleton.read_text(self.config.application_config))
