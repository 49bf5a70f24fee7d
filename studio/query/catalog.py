"""
Endpoint Catalog

Descriptor builders for every read the studio screens perform, and the
mutation definitions with their invalidation policies.

Most reads resolve through the KeyResolver. Shot versions and character
image variants share a base path with a rule-table endpoint, so they
carry a fetcher that requests their nested path directly.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Optional, Tuple
from urllib.parse import quote

from ..contracts.descriptors import QueryDescriptor
from .cache import Fetcher
from .mutation import MutationDefinition

if TYPE_CHECKING:
    from ..transport import Transport


# =============================================================================
# BASE PATHS
# =============================================================================

PROJECTS = "/api/projects"
SCRIPTS = "/api/scripts"
SCENES = "/api/scenes"
SHOTS = "/api/shots"
CHARACTERS = "/api/characters"
PERFORMANCE_GUIDES = "/api/performance-guides"
PRODUCTION_NOTES = "/api/production-notes"
CALL_SHEETS = "/api/call-sheets"


# =============================================================================
# READ DESCRIPTORS
# =============================================================================

def projects() -> QueryDescriptor:
    return QueryDescriptor.of(PROJECTS)


def project(project_id: Optional[str]) -> QueryDescriptor:
    return QueryDescriptor.of(PROJECTS, project_id)


def project_analysis(project_id: Optional[str]) -> QueryDescriptor:
    """Nested path, no query string: /api/projects/<id>/analysis."""
    return QueryDescriptor.of(PROJECTS, project_id, "analysis")


def scripts(project_id: Optional[str] = None) -> QueryDescriptor:
    return QueryDescriptor.of(SCRIPTS, project_id)


def scenes(project_id: Optional[str] = None) -> QueryDescriptor:
    return QueryDescriptor.of(SCENES, project_id)


def shots(scene_id: Optional[str] = None) -> QueryDescriptor:
    return QueryDescriptor.of(SHOTS, scene_id)


def shot_versions(shot_id: Optional[str]) -> QueryDescriptor:
    return QueryDescriptor.of(SHOTS, shot_id, "versions")


def characters(project_id: Optional[str] = None) -> QueryDescriptor:
    return QueryDescriptor.of(CHARACTERS, project_id)


def character_references(project_id: str) -> QueryDescriptor:
    if not project_id:
        raise ValueError("character_references needs a project id")
    return QueryDescriptor.of(f"{PROJECTS}/{project_id}/characters/references")


def character_image_variants(character_id: Optional[str]) -> QueryDescriptor:
    return QueryDescriptor.of(CHARACTERS, character_id, "image-variants")


# Variant statuses that mean image generation is still running
GENERATING_VARIANT_STATUSES = frozenset({"pending", "generating"})


def variants_settled(variants: Any) -> bool:
    """True once no image variant is pending or generating."""
    return not any(
        isinstance(v, dict) and v.get("status") in GENERATING_VARIANT_STATUSES
        for v in variants or ()
    )


def performance_guides(
    scene_id: Optional[str] = None,
    character_id: Optional[str] = None
) -> QueryDescriptor:
    return QueryDescriptor.of(PERFORMANCE_GUIDES, scene_id, character_id)


def production_notes(scene_id: Optional[str] = None) -> QueryDescriptor:
    return QueryDescriptor.of(PRODUCTION_NOTES, scene_id)


def call_sheets(project_id: Optional[str] = None) -> QueryDescriptor:
    """No rule-table entry: resolves by fallback join to /api/call-sheets/<id>."""
    return QueryDescriptor.of(CALL_SHEETS, project_id)


def nested_path_fetcher(transport: Transport) -> Fetcher:
    """
    Fetcher that GETs the descriptor's elements joined as a path.

    Used for reads whose base path has a rule-table entry that would
    otherwise turn the id into a query parameter.
    """
    async def fetch(descriptor: QueryDescriptor) -> Any:
        segments = [descriptor.path] + [quote(p.render(), safe='') for p in descriptor.params]
        return await transport.send("GET", "/".join(segments))
    return fetch


# =============================================================================
# MUTATIONS
# =============================================================================

def _references(params) -> Tuple[QueryDescriptor, ...]:
    # reference lists are keyed by project; without one there is nothing to mark
    project_id = params.get("projectId")
    return (character_references(project_id),) if project_id else ()


CREATE_PROJECT = MutationDefinition(
    name="create_project",
    method="POST",
    path=PROJECTS,
    invalidates=lambda p: (projects(),)
)

DELETE_PROJECT = MutationDefinition(
    name="delete_project",
    method="DELETE",
    path=PROJECTS + "/{projectId}",
    invalidates=lambda p: (projects(),)
)

SAVE_SCRIPT = MutationDefinition(
    name="save_script",
    method="POST",
    path=SCRIPTS,
    invalidates=lambda p: (scripts(),)
)

GENERATE_SCRIPT = MutationDefinition(
    name="generate_script",
    method="POST",
    path=SCRIPTS + "/generate",
    invalidates=lambda p: (scripts(), scenes())
)

CREATE_SCENE = MutationDefinition(
    name="create_scene",
    method="POST",
    path=SCENES,
    invalidates=lambda p: (scenes(p.get("projectId")),)
)

UPDATE_SCENE = MutationDefinition(
    name="update_scene",
    method="PATCH",
    path=SCENES + "/{sceneId}",
    invalidates=lambda p: (scenes(p.get("projectId")),)
)

GENERATE_SHOTS = MutationDefinition(
    name="generate_shots",
    method="POST",
    path=SHOTS + "/generate",
    invalidates=lambda p: (shots(),)
)

UPDATE_SHOT = MutationDefinition(
    name="update_shot",
    method="PATCH",
    path=SHOTS + "/{shotId}",
    invalidates=lambda p: (shots(), shot_versions(p.get("shotId")))
)

SAVE_SHOT_VERSION = MutationDefinition(
    name="save_shot_version",
    method="POST",
    path=SHOTS + "/{shotId}/versions",
    invalidates=lambda p: (shot_versions(p.get("shotId")),)
)

RESTORE_SHOT_VERSION = MutationDefinition(
    name="restore_shot_version",
    method="POST",
    path=SHOTS + "/{shotId}/versions/{versionId}/restore",
    invalidates=lambda p: (shots(), shot_versions(p.get("shotId")))
)

CREATE_CHARACTER = MutationDefinition(
    name="create_character",
    method="POST",
    path=CHARACTERS,
    invalidates=lambda p: _references(p) + (characters(),)
)

DELETE_CHARACTER = MutationDefinition(
    name="delete_character",
    method="DELETE",
    path=CHARACTERS + "/{characterId}",
    invalidates=lambda p: _references(p) + (characters(),)
)

EXTRACT_CHARACTERS = MutationDefinition(
    name="extract_characters",
    method="POST",
    path=PROJECTS + "/{projectId}/characters/extract",
    invalidates=lambda p: _references(p) + (characters(),)
)

UPLOAD_REFERENCE_IMAGE = MutationDefinition(
    name="upload_reference_image",
    method="POST",
    path=CHARACTERS + "/{characterId}/reference-image",
    invalidates=_references
)

ADD_CHARACTER_ASSET = MutationDefinition(
    name="add_character_asset",
    method="POST",
    path=CHARACTERS + "/{characterId}/assets",
    invalidates=_references
)

DELETE_CHARACTER_ASSET = MutationDefinition(
    name="delete_character_asset",
    method="DELETE",
    path=CHARACTERS + "/{characterId}/assets/{assetId}",
    invalidates=_references
)

GENERATE_CHARACTER_IMAGES = MutationDefinition(
    name="generate_character_images",
    method="POST",
    path=CHARACTERS + "/{characterId}/generate-images",
    invalidates=lambda p: (character_image_variants(p.get("characterId")),)
)

APPLY_IMAGE_VARIANT = MutationDefinition(
    name="apply_image_variant",
    method="POST",
    path=CHARACTERS + "/{characterId}/image-variants/{variantId}/apply",
    invalidates=_references
)

GENERATE_PERFORMANCE_GUIDE = MutationDefinition(
    name="generate_performance_guide",
    method="POST",
    path=PERFORMANCE_GUIDES + "/generate",
    invalidates=lambda p: (performance_guides(),)
)

GENERATE_PRODUCTION_NOTES = MutationDefinition(
    name="generate_production_notes",
    method="POST",
    path=PRODUCTION_NOTES + "/generate",
    invalidates=lambda p: (production_notes(),)
)

PARSE_CALL_SHEET = MutationDefinition(
    name="parse_call_sheet",
    method="POST",
    path=CALL_SHEETS + "/parse-text",
    invalidates=lambda p: (call_sheets(p.get("projectId")), scenes(p.get("projectId")))
)


MUTATIONS: Tuple[MutationDefinition, ...] = (
    CREATE_PROJECT, DELETE_PROJECT,
    SAVE_SCRIPT, GENERATE_SCRIPT,
    CREATE_SCENE, UPDATE_SCENE,
    GENERATE_SHOTS, UPDATE_SHOT, SAVE_SHOT_VERSION, RESTORE_SHOT_VERSION,
    CREATE_CHARACTER, DELETE_CHARACTER, EXTRACT_CHARACTERS,
    UPLOAD_REFERENCE_IMAGE, ADD_CHARACTER_ASSET, DELETE_CHARACTER_ASSET,
    GENERATE_CHARACTER_IMAGES, APPLY_IMAGE_VARIANT,
    GENERATE_PERFORMANCE_GUIDE, GENERATE_PRODUCTION_NOTES,
    PARSE_CALL_SHEET,
)
