"""
Record CRUD over the projects and contacts collections.

Lookups accept either the MongoDB ``_id`` or, for projects, the external
``id`` string; ``lookup`` reports which one matched instead of relying on the
driver to throw for malformed ids.
"""

import json
import time
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Type

from bson import ObjectId
from fastapi import Depends
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from pymongo import DESCENDING, ReturnDocument

from database import CONTACTS, PROJECTS, Database, Sort, get_database, utcnow
from errors import NotFoundError, ServiceUnavailableError, ValidationError
from logging_config import get_logger
from schemas import Contact, Project, ProjectUpdate

logger = get_logger("services")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50

# Required on create; may not be cleared by an update
PROJECT_REQUIRED_FIELDS = ("title", "description", "category")


class LookupOutcome(Enum):
    FOUND_BY_INTERNAL_ID = "internal_id"
    FOUND_BY_EXTERNAL_ID = "external_id"
    NOT_FOUND = "not_found"


class Lookup(NamedTuple):
    outcome: LookupOutcome
    document: Optional[Dict[str, Any]]

    @property
    def found(self) -> bool:
        return self.outcome is not LookupOutcome.NOT_FOUND


def validate_payload(schema: Type[BaseModel], payload: Dict[str, Any]) -> BaseModel:
    """Run the document schema and report the offending fields by wire name."""
    try:
        return schema.model_validate(payload)
    except SchemaError as exc:
        fields = []
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"]) or "body"
            if name not in fields:
                fields.append(name)
        missing = [
            ".".join(str(part) for part in error["loc"])
            for error in exc.errors()
            if error["type"] == "missing"
        ]
        if missing and len(missing) == len(fields):
            message = f"Missing required field(s): {', '.join(missing)}"
        else:
            message = f"Invalid field(s): {', '.join(fields)}"
        raise ValidationError(message, fields=fields)


def parse_payload(payload: Any) -> Dict[str, Any]:
    """Accept a dict, a JSON string, or a form dict carrying JSON under ``project``."""
    if isinstance(payload, (str, bytes)):
        payload = _loads(payload)
    elif isinstance(payload, dict) and isinstance(payload.get("project"), (str, bytes)):
        payload = _loads(payload["project"])
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return dict(payload)


def _loads(raw: Any) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        raise ValidationError("Malformed JSON in request body", fields=["project"])


class RecordService:
    collection_name: str = ""
    kind: str = "Record"
    external_id_field: Optional[str] = None
    create_schema: Type[BaseModel] = BaseModel
    sort: Sort = [("createdAt", DESCENDING), ("_id", DESCENDING)]

    def __init__(self, database: Database):
        self.database = database

    def list(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Tuple[List[Dict[str, Any]], int]:
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive integers", fields=["page", "limit"])
        items = self.database.get_documents(
            self.collection_name, sort=self.sort, skip=(page - 1) * limit, limit=limit
        )
        total = self.database.count_documents(self.collection_name)
        return items, total

    def lookup(self, key: str) -> Lookup:
        collection = self.database.collection(self.collection_name)
        with self.database.operation(f"lookup {self.kind} {key}"):
            if ObjectId.is_valid(key):
                doc = collection.find_one({"_id": ObjectId(key)})
                if doc is not None:
                    return Lookup(LookupOutcome.FOUND_BY_INTERNAL_ID, doc)
            if self.external_id_field:
                doc = collection.find_one({self.external_id_field: key})
                if doc is not None:
                    return Lookup(LookupOutcome.FOUND_BY_EXTERNAL_ID, doc)
        return Lookup(LookupOutcome.NOT_FOUND, None)

    def get(self, key: str) -> Dict[str, Any]:
        lookup = self.lookup(key)
        if not lookup.found:
            raise NotFoundError(self.kind, key)
        return lookup.document

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.require_connection()
        record = validate_payload(self.create_schema, parse_payload(payload))
        return self.database.create_document(self.collection_name, record)

    def delete(self, key: str) -> Dict[str, Any]:
        existing = self.get(key)
        collection = self.database.collection(self.collection_name)
        with self.database.operation(f"delete {self.kind} {key}"):
            collection.delete_one({"_id": existing["_id"]})
        logger.info("Deleted %s %s", self.kind, existing["_id"])
        return existing

    def require_connection(self) -> None:
        if not self.database.is_connected():
            raise ServiceUnavailableError()

    def _apply(self, existing: Dict[str, Any], changes: Dict[str, Any], duplicate_message: str = "Duplicate key") -> Dict[str, Any]:
        changes = dict(changes)
        changes["updatedAt"] = utcnow()
        collection = self.database.collection(self.collection_name)
        with self.database.operation(f"update {self.kind} {existing['_id']}", duplicate_message):
            doc = collection.find_one_and_update(
                {"_id": existing["_id"]},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            # deleted between lookup and update
            raise NotFoundError(self.kind, str(existing["_id"]))
        return doc


class ProjectService(RecordService):
    collection_name = PROJECTS
    kind = "Project"
    external_id_field = "id"
    create_schema = Project

    def create(self, payload: Any, images: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        self.require_connection()
        data = parse_payload(payload)
        if images:
            data["images"] = list(images)
        if data.get("id") in (None, ""):
            data["id"] = str(int(time.time() * 1000))
        project = validate_payload(Project, data)
        doc = self.database.create_document(
            PROJECTS, project, duplicate_message=f"Project with id '{project.id}' already exists"
        )
        logger.info("Created project %s (id=%s)", doc["_id"], doc["id"])
        return doc

    def update(self, key: str, payload: Any, images: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        existing = self.get(key)
        data = parse_payload(payload)
        changes = validate_payload(ProjectUpdate, data).model_dump(by_alias=True, exclude_unset=True)

        cleared = [name for name in PROJECT_REQUIRED_FIELDS if name in changes and changes[name] is None]
        if cleared:
            raise ValidationError(f"Missing required field(s): {', '.join(cleared)}", fields=cleared)

        # images only ever grow through uploads
        changes.pop("images", None)
        if images:
            changes["images"] = list(existing.get("images") or []) + list(images)
        changes["id"] = existing.get("id") or key

        doc = self._apply(existing, changes)
        logger.info("Updated project %s (id=%s)", doc["_id"], doc["id"])
        return doc

    def upsert(self, seed: Dict[str, Any]) -> bool:
        """Create or fully overwrite the project with ``seed['id']``.

        Returns True when a new project was created.
        """
        self.require_connection()
        project = validate_payload(Project, parse_payload(seed))
        if not project.id:
            raise ValidationError("Missing required field(s): id", fields=["id"])
        collection = self.database.collection(PROJECTS)
        with self.database.operation(f"lookup project {project.id}"):
            existing = collection.find_one({"id": project.id})
        if existing is None:
            self.database.create_document(
                PROJECTS, project, duplicate_message=f"Project with id '{project.id}' already exists"
            )
            return True
        self._apply(existing, project.model_dump(by_alias=True, exclude_unset=True))
        return False


class ContactService(RecordService):
    collection_name = CONTACTS
    kind = "Contact"
    create_schema = Contact

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_payload(payload)
        # the read flag is never client-supplied
        return super().create({key: data[key] for key in ("name", "email", "message") if key in data})

    def mark_read(self, key: str) -> Dict[str, Any]:
        return self._apply(self.get(key), {"read": True})


def get_project_service(database: Database = Depends(get_database)) -> ProjectService:
    return ProjectService(database)


def get_contact_service(database: Database = Depends(get_database)) -> ContactService:
    return ContactService(database)
