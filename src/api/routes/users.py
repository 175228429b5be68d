"""
User API routes
Each handler issues its driver call(s) directly against the users collection.
"""

import logging
from typing import Any, List
from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError
from pymongo import ASCENDING, ReturnDocument

from database.connection import get_users_collection
from models.user import (
    UserCreateRequest,
    UserUpdateRequest,
    UserResponse,
    UserSummaryResponse,
    UserDeletedResponse,
    UserRemovedResponse,
    UsersDeletedCountResponse,
)
from utils.error_handling import server_error
from utils.object_ids import parse_object_id, serialize_document, serialize_documents

router = APIRouter()
logger = logging.getLogger(__name__)

CLASSIC_UPDATE_FOOD = "hamburger"
FIND_ONE_AND_UPDATE_AGE = 20
SEARCH_FOOD = "burritos"
SEARCH_LIMIT = 2


async def _insert_user(collection, request: UserCreateRequest) -> dict:
    document = request.to_document()
    result = await collection.insert_one(document)
    document["_id"] = result.inserted_id
    return serialize_document(document)


@router.get("/", response_model=List[UserResponse], response_model_exclude_unset=True)
async def list_users(collection=Depends(get_users_collection)):
    """Return all users"""
    try:
        users = await collection.find().to_list(length=None)
        return serialize_documents(users)
    except Exception as e:
        raise server_error("fetching all users", e)


@router.post("/", status_code=201, response_model=UserResponse, response_model_exclude_unset=True)
async def create_user(request: UserCreateRequest, collection=Depends(get_users_collection)):
    """Add a new user"""
    try:
        return await _insert_user(collection, request)
    except Exception as e:
        raise server_error("adding user", e)


@router.post("/create-one", status_code=201, response_model=UserResponse, response_model_exclude_unset=True)
async def create_one_user(request: UserCreateRequest, collection=Depends(get_users_collection)):
    """Create and save a single user record"""
    try:
        return await _insert_user(collection, request)
    except Exception as e:
        raise server_error("creating single user", e)


@router.post("/create-many", status_code=201, response_model=List[UserResponse], response_model_exclude_unset=True)
async def create_many_users(payload: Any = Body(None), collection=Depends(get_users_collection)):
    """Create many users in one insert; every item is validated first"""
    if not isinstance(payload, list) or len(payload) == 0:
        raise HTTPException(status_code=400, detail="Request body must be a non-empty array of user objects.")

    requests = []
    for index, item in enumerate(payload):
        try:
            requests.append(UserCreateRequest.model_validate(item))
        except ValidationError as e:
            messages = "; ".join(
                " -> ".join(str(loc) for loc in (index,) + tuple(error["loc"])) + f": {error['msg']}"
                for error in e.errors()
            )
            raise HTTPException(status_code=400, detail=messages)

    try:
        documents = [request.to_document() for request in requests]
        result = await collection.insert_many(documents)
        for document, inserted_id in zip(documents, result.inserted_ids):
            document["_id"] = inserted_id
        return serialize_documents(documents)
    except Exception as e:
        raise server_error("creating many users", e)


@router.get("/find-by-name/{name}", response_model=List[UserResponse], response_model_exclude_unset=True)
async def find_users_by_name(name: str, collection=Depends(get_users_collection)):
    """Find all users with the given name"""
    try:
        users = await collection.find({"name": name}).to_list(length=None)
        return serialize_documents(users)
    except Exception as e:
        raise server_error("finding users by name", e)


@router.get("/find-one-food/{food}", response_model=UserResponse, response_model_exclude_unset=True)
async def find_one_user_by_food(food: str, collection=Depends(get_users_collection)):
    """Find one user having the given food in their favorites"""
    try:
        user = await collection.find_one({"favoriteFoods": food})
    except Exception as e:
        raise server_error("finding one user by favorite food", e)

    if user is None:
        raise HTTPException(status_code=404, detail=f"No person found with favorite food: {food}")
    return serialize_document(user)


@router.get("/find-by-id/{user_id}", response_model=UserResponse, response_model_exclude_unset=True)
async def find_user_by_id(user_id: str, collection=Depends(get_users_collection)):
    """Find the user with the given id"""
    object_id = parse_object_id(user_id)
    try:
        user = await collection.find_one({"_id": object_id})
    except Exception as e:
        raise server_error("finding user by ID", e)

    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize_document(user)


@router.put("/classic-update/{user_id}", response_model=UserResponse, response_model_exclude_unset=True)
async def classic_update_user(user_id: str, collection=Depends(get_users_collection)):
    """
    Find a user, add "hamburger" to their favorite foods, then save.

    The read and the write are separate calls; a concurrent writer can
    interleave between them.
    """
    object_id = parse_object_id(user_id)
    try:
        user = await collection.find_one({"_id": object_id})
        if user is None:
            raise HTTPException(status_code=404, detail="User not found for classic update")

        favorite_foods = list(user.get("favoriteFoods") or [])
        if CLASSIC_UPDATE_FOOD not in favorite_foods:
            favorite_foods.append(CLASSIC_UPDATE_FOOD)
            result = await collection.update_one(
                {"_id": object_id},
                {"$set": {"favoriteFoods": favorite_foods}}
            )
            if result.matched_count == 0:
                raise HTTPException(status_code=404, detail="User not found for classic update")
            user["favoriteFoods"] = favorite_foods

        return serialize_document(user)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("performing classic update", e)


@router.put("/find-one-and-update/{name}", response_model=UserResponse, response_model_exclude_unset=True)
async def find_one_and_update_user(name: str, collection=Depends(get_users_collection)):
    """Find a user by name and set their age to 20"""
    try:
        user = await collection.find_one_and_update(
            {"name": name},
            {"$set": {"age": FIND_ONE_AND_UPDATE_AGE}},
            return_document=ReturnDocument.AFTER
        )
    except Exception as e:
        raise server_error("performing find one and update", e)

    if user is None:
        raise HTTPException(status_code=404, detail=f"No person found with name: {name}")
    return serialize_document(user)


@router.delete("/find-by-id-and-remove/{user_id}", response_model=UserRemovedResponse, response_model_exclude_unset=True)
async def find_user_by_id_and_remove(user_id: str, collection=Depends(get_users_collection)):
    """Delete one user by id"""
    object_id = parse_object_id(user_id)
    try:
        removed = await collection.find_one_and_delete({"_id": object_id})
    except Exception as e:
        raise server_error("removing user by ID", e)

    if removed is None:
        raise HTTPException(status_code=404, detail="User not found for removal")
    return {"message": "User successfully removed", "removedPerson": serialize_document(removed)}


@router.delete("/delete-many-by-name/{name}", response_model=UsersDeletedCountResponse)
async def delete_users_by_name(name: str, collection=Depends(get_users_collection)):
    """Delete every user with the given name"""
    try:
        result = await collection.delete_many({"name": name})
    except Exception as e:
        raise server_error("removing multiple users", e)

    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail=f"No users found with name: {name} to delete.")
    return {
        "message": f'{result.deleted_count} user(s) with name "{name}" successfully removed.',
        "deletedCount": result.deleted_count
    }


@router.get("/search-burritos", response_model=List[UserSummaryResponse], response_model_exclude_unset=True)
async def search_burrito_lovers(collection=Depends(get_users_collection)):
    """Burrito lovers sorted by name, first two only, age hidden"""
    try:
        cursor = collection.find(
            {"favoriteFoods": SEARCH_FOOD},
            {"age": 0},
            sort=[("name", ASCENDING)],
            limit=SEARCH_LIMIT
        )
        users = await cursor.to_list(length=None)
        return serialize_documents(users)
    except Exception as e:
        raise server_error("chaining search queries", e)


@router.put("/{user_id}", response_model=UserResponse, response_model_exclude_unset=True)
async def update_user(user_id: str, request: UserUpdateRequest, collection=Depends(get_users_collection)):
    """Replace the supplied fields of a user"""
    object_id = parse_object_id(user_id)
    updates = request.to_updates()
    try:
        if updates:
            user = await collection.find_one_and_update(
                {"_id": object_id},
                {"$set": updates},
                return_document=ReturnDocument.AFTER
            )
        else:
            user = await collection.find_one({"_id": object_id})
    except Exception as e:
        raise server_error("updating user by ID", e)

    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize_document(user)


@router.delete("/{user_id}", response_model=UserDeletedResponse, response_model_exclude_unset=True)
async def delete_user(user_id: str, collection=Depends(get_users_collection)):
    """Remove a user by id"""
    object_id = parse_object_id(user_id)
    try:
        deleted = await collection.find_one_and_delete({"_id": object_id})
    except Exception as e:
        raise server_error("deleting user by ID", e)

    if deleted is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"message": "User deleted successfully", "deletedUser": serialize_document(deleted)}
