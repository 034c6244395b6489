import logging
import os
import re
import shutil
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from notequiz.api.dependencies import get_store
from notequiz.api.schemas import DeleteOut, GroupIn, GroupOut, GroupUpdate, UploadOut
from notequiz.config import Settings, get_settings
from notequiz.storage.json_store import NoteQuizJsonStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/groups", tags=["Groups"])

# Owner ids become part of a filename on disk
_OWNER_ID_REGEX = re.compile(r"^[A-Za-z0-9_-]+$")
_EXTENSION_REGEX = re.compile(r"^\.[A-Za-z0-9]+$")


def _get_group_or_404(store: NoteQuizJsonStore, group_id: str) -> dict:
    group = store.get_group(group_id)
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


# PUBLIC_INTERFACE
def upload_filename(owner_id: str, original_name: Optional[str], timestamp_ms: int) -> str:
    """
    Build the stored name of an uploaded file: {owner}-{timestamp}{ext}.

    Raises:
        ValueError: owner_id is not made of letters, digits, '_' and '-'.
    """
    if not _OWNER_ID_REGEX.match(owner_id or ""):
        raise ValueError(f"invalid owner id {owner_id!r}")
    _, ext = os.path.splitext(os.path.basename(original_name or ""))
    if not _EXTENSION_REGEX.match(ext):
        ext = ""
    return f"{owner_id}-{timestamp_ms}{ext}"


@router.post(
    "",
    response_model=GroupOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create group",
    description="Creates a group under a fresh identifier and returns the stored record.",
)
def create_group(group_in: GroupIn, store: NoteQuizJsonStore = Depends(get_store)) -> GroupOut:
    """Create a group and return the stored record."""
    group = store.create_group(group_in.model_dump())
    logger.info("Created group %s", group["id"])
    return GroupOut(**group)


@router.get(
    "",
    response_model=List[GroupOut],
    summary="List groups",
    description="Returns every stored group, in creation order.",
)
def find_all_groups(store: NoteQuizJsonStore = Depends(get_store)) -> List[GroupOut]:
    """
    List all stored groups.

    Returns:
        List[GroupOut]: Collection of group records.
    """
    return [GroupOut(**g) for g in store.list_groups()]


@router.get(
    "/{group_id}",
    response_model=GroupOut,
    summary="Get group by id",
    description="Returns the group record for the specified group identifier.",
)
def find_group_by_id(group_id: str, store: NoteQuizJsonStore = Depends(get_store)) -> GroupOut:
    """
    Retrieve a single group.

    Raises:
        HTTPException 404 if the group is not found.
    """
    return GroupOut(**_get_group_or_404(store, group_id))


@router.put(
    "/{group_id}",
    response_model=GroupOut,
    summary="Update group",
    description="Applies the fields present in the body to the group and returns the updated record.",
)
def update_group(
    group_id: str, changes: GroupUpdate, store: NoteQuizJsonStore = Depends(get_store)
) -> GroupOut:
    """
    Apply a partial update to a group.

    Only fields present in the request body are changed.
    """
    group = store.update_group(group_id, changes.model_dump(exclude_unset=True))
    if group is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return GroupOut(**group)


@router.delete(
    "/{group_id}",
    response_model=DeleteOut,
    summary="Delete group",
    description="Removes the group. Files it references are left on disk.",
)
def delete_group(group_id: str, store: NoteQuizJsonStore = Depends(get_store)) -> DeleteOut:
    """
    Delete a group.

    Raises:
        HTTPException 404 if the group is not found.
    """
    if not store.delete_group(group_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return DeleteOut(deleted=True)


@router.post(
    "/{group_id}/uploadProfilePicture",
    response_model=UploadOut,
    summary="Upload group profile picture",
    description=(
        "Stores the multipart file field 'profilePicture' under the uploads directory as "
        "'{userId}-{timestamp}{ext}' and records its path on the group."
    ),
)
def upload_profile_picture(
    group_id: str,
    profilePicture: Optional[UploadFile] = File(default=None),
    userId: Optional[str] = Form(default=None),
    store: NoteQuizJsonStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> UploadOut:
    """
    Save an uploaded profile picture and attach it to the group.

    Raises:
        HTTPException 400 if no file was sent or userId is not a plain
        identifier, 404 if the group is not found, 500 if the group could
        not be updated.
    """
    if profilePicture is None or not profilePicture.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")
    try:
        filename = upload_filename(userId or group_id, profilePicture.filename, int(time.time() * 1000))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid userId.")
    _get_group_or_404(store, group_id)

    os.makedirs(settings.uploads_dir, exist_ok=True)
    uploads_root = os.path.realpath(settings.uploads_dir)
    path = os.path.join(settings.uploads_dir, filename)
    if os.path.dirname(os.path.realpath(path)) != uploads_root:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid upload path.")
    with open(path, "wb") as out:
        shutil.copyfileobj(profilePicture.file, out)
    logger.info("Saved profile picture for group %s to %s", group_id, path)

    try:
        updated = store.set_group_profile_picture(group_id, path)
    except (OSError, ValueError):
        logger.exception("Failed to record profile picture on group %s", group_id)
        updated = None
    if updated is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update group with new profile picture.",
        )
    return UploadOut(message=f"File uploaded successfully: {path}", path=path)
