import logging
from typing import Any, Dict, List, Optional

import pymongo
from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from tasktracker.core.models import Task, TaskCreate, TaskStatus, TaskUpdate
from tasktracker.core.task_repository import (
    StorageError,
    TaskNotFoundError,
    TaskRepository,
    merge_task_update,
    utc_now,
)

# oldest first; _id breaks ties between tasks created in the same millisecond
LIST_SORT = [("created_at", pymongo.ASCENDING), ("_id", pymongo.ASCENDING)]


def parse_object_id(task_id: str) -> Optional[ObjectId]:
    if not ObjectId.is_valid(task_id):
        return None
    return ObjectId(task_id)


def document_to_task(document: Dict[str, Any]) -> Task:
    # documents written by older clients may lack the timestamps or the defaults
    created_at = document.get("created_at") or document["_id"].generation_time
    return Task(
        id=str(document["_id"]),
        title=document.get("title", ""),
        description=document.get("description") or "",
        status=document.get("status") or TaskStatus.PENDING,
        created_at=created_at,
        updated_at=document.get("updated_at") or created_at,
    )


class MongoTaskRepository(TaskRepository):
    def __init__(
        self,
        collection: Collection,
        client: Optional[pymongo.MongoClient] = None,
    ):
        self.collection = collection
        self.client = client

    @classmethod
    def from_uri(
        cls, uri: str, database: str, collection: str, timeout_ms: int
    ) -> "MongoTaskRepository":
        logging.info(f"Initializing MongoDB task store {database}.{collection}")
        client: pymongo.MongoClient = pymongo.MongoClient(
            uri, tz_aware=True, serverSelectionTimeoutMS=timeout_ms
        )
        return cls(client[database][collection], client=client)

    def check_connection(self) -> None:
        if self.client is None:
            return
        try:
            self.client.admin.command("ping")
        except PyMongoError as e:
            raise StorageError(f"MongoDB is not reachable: {e}") from e

    def list_tasks(self) -> List[Task]:
        try:
            documents = list(self.collection.find().sort(LIST_SORT))
        except PyMongoError as e:
            logging.error("Failed to list tasks", exc_info=True)
            raise StorageError(str(e)) from e
        return [document_to_task(document) for document in documents]

    def create_task(self, task: TaskCreate) -> Task:
        now = utc_now()
        document = task.model_dump(mode="json")
        document["created_at"] = now
        document["updated_at"] = now
        try:
            result = self.collection.insert_one(document)
        except PyMongoError as e:
            logging.error("Failed to insert task", exc_info=True)
            raise StorageError(str(e)) from e
        document["_id"] = result.inserted_id
        return document_to_task(document)

    def update_task(self, task_id: str, update: TaskUpdate) -> Task:
        object_id = parse_object_id(task_id)
        if object_id is None:
            raise TaskNotFoundError(task_id)

        try:
            existing = self.collection.find_one({"_id": object_id})
        except PyMongoError as e:
            logging.error(f"Failed to fetch task {task_id}", exc_info=True)
            raise StorageError(str(e)) from e
        if existing is None:
            raise TaskNotFoundError(task_id)

        # validate the merged record before anything is written
        merged = merge_task_update(document_to_task(existing), update)
        changes = update.changes()
        changes["updated_at"] = merged.updated_at
        if "description" in changes:
            changes["description"] = merged.description

        try:
            document = self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": changes},
                return_document=pymongo.ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logging.error(f"Failed to update task {task_id}", exc_info=True)
            raise StorageError(str(e)) from e
        if document is None:
            # deleted between the read and the write
            raise TaskNotFoundError(task_id)
        return document_to_task(document)

    def delete_task(self, task_id: str) -> None:
        object_id = parse_object_id(task_id)
        if object_id is None:
            raise TaskNotFoundError(task_id)
        try:
            result = self.collection.delete_one({"_id": object_id})
        except PyMongoError as e:
            logging.error(f"Failed to delete task {task_id}", exc_info=True)
            raise StorageError(str(e)) from e
        if result.deleted_count == 0:
            raise TaskNotFoundError(task_id)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
