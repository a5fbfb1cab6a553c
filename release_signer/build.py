"""Per-build-type configuration produced for the Android build."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .config import ProjectConfig
from .identity import SigningIdentity
from .properties import CredentialsFile
from .resolver import SigningResolution, resolve_signing_identity


@dataclass(frozen=True)
class FrameworkVersions:
    """SDK and version values owned by the enclosing framework."""

    compile_sdk: Optional[int] = None
    ndk_version: Optional[str] = None
    min_sdk: Optional[int] = None
    target_sdk: Optional[int] = None
    version_code: Optional[int] = None
    version_name: Optional[str] = None


@dataclass(frozen=True)
class BuildType:
    """Settings for one build variant."""

    name: str
    resolution: SigningResolution
    minify_enabled: bool
    shrink_resources: bool
    proguard_files: Tuple[str, ...] = ()

    @property
    def signing(self) -> SigningIdentity:
        return self.resolution.identity

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        return {
            "signing": self.signing.to_dict(redact=redact),
            "signing_fell_back": self.resolution.fell_back,
            "minify_enabled": self.minify_enabled,
            "shrink_resources": self.shrink_resources,
            "proguard_files": list(self.proguard_files),
        }


@dataclass(frozen=True)
class BuildConfiguration:
    """Everything the Android build reads from this project's configuration."""

    application_id: str
    namespace: str
    java_version: int
    framework: FrameworkVersions
    build_types: Dict[str, BuildType] = field(default_factory=dict)

    def get_build_type(self, name: str) -> BuildType:
        """
        Get a build type by name.

        Raises:
            KeyError: If the build type is not configured
        """
        try:
            return self.build_types[name]
        except KeyError:
            raise KeyError(
                f"Unknown build type {name!r}; known: {', '.join(self.build_types)}"
            )

    @property
    def warnings(self) -> List[str]:
        found = []
        for build_type in self.build_types.values():
            found.extend(build_type.resolution.warnings)
        return found

    def to_dict(self, redact: bool = True) -> Dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "application_id": self.application_id,
            "namespace": self.namespace,
            "compile_options": {
                "source_compatibility": self.java_version,
                "target_compatibility": self.java_version,
                "jvm_target": str(self.java_version),
            },
            "default_config": {
                "application_id": self.application_id,
                "min_sdk": self.framework.min_sdk,
                "target_sdk": self.framework.target_sdk,
                "version_code": self.framework.version_code,
                "version_name": self.framework.version_name,
            },
            "compile_sdk": self.framework.compile_sdk,
            "ndk_version": self.framework.ndk_version,
            "build_types": {
                name: build_type.to_dict(redact=redact)
                for name, build_type in self.build_types.items()
            },
        }


def configure_build(
    project_config: ProjectConfig,
    credentials: Optional[CredentialsFile],
    project_root,
) -> BuildConfiguration:
    """
    Assemble the build configuration for every build type.

    Args:
        project_config: Project configuration
        credentials: Credentials file loaded once by the caller, or None
        project_root: Directory relative storeFile values resolve against

    Returns:
        BuildConfiguration

    Raises:
        MissingCredentialsFileError: If the release policy is "error" and
            there are no credentials
    """
    on_missing = project_config.get_on_missing_credentials()

    build_types = {}
    for name in project_config.get_build_type_names():
        settings = project_config.get_build_type_config(name)
        resolution = resolve_signing_identity(
            credentials, project_root, build_type=name, on_missing=on_missing
        )
        build_types[name] = BuildType(
            name=name,
            resolution=resolution,
            minify_enabled=settings["minify_enabled"],
            shrink_resources=settings["shrink_resources"],
            proguard_files=tuple(settings["proguard_files"]),
        )

    return BuildConfiguration(
        application_id=project_config.application_id,
        namespace=project_config.namespace,
        java_version=project_config.java_version,
        framework=FrameworkVersions(**project_config.get_framework_values()),
        build_types=build_types,
    )
