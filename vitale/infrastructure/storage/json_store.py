"""Local JSON file storage for assessments and health history."""
import json
import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from vitale.application.ports import HealthRecordRepository, PersistenceError
from vitale.application.schemas import LeadInteraction, MemberAssessmentEntry
from vitale.domain.models import MetricSample, VitalsSample
from vitale.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class JsonHealthStore(HealthRecordRepository):
    """Keeps every record in a single JSON document on disk."""

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            storage_path: Path to the JSON file.
                          Defaults to the configured store path under .streamlit/
        """
        self.storage_path = storage_path or Settings().store_path
        self._ensure_storage_exists()

    def _ensure_storage_exists(self) -> None:
        """Create storage directory and file if they don't exist."""
        storage_dir = os.path.dirname(self.storage_path)
        try:
            if storage_dir and not os.path.exists(storage_dir):
                os.makedirs(storage_dir, exist_ok=True)
            if not os.path.exists(self.storage_path) or os.path.getsize(self.storage_path) == 0:
                self._save(self._empty())
        except OSError as e:
            raise PersistenceError(f"Cannot initialise store at {self.storage_path}: {e}") from e

    @staticmethod
    def _empty() -> Dict[str, Any]:
        return {"lead_interactions": [], "profiles": {}}

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.storage_path, 'r') as f:
                return json.load(f)
        except FileNotFoundError:
            return self._empty()
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read store at {self.storage_path}: {e}") from e

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            with open(self.storage_path, 'w') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise PersistenceError(f"Cannot write store at {self.storage_path}: {e}") from e

    def _profile(self, data: Dict[str, Any], profile_id: str) -> Dict[str, List[dict]]:
        return data["profiles"].setdefault(profile_id, {"assessments": [], "metrics": [], "vitals": []})

    def _append(self, profile_id: str, collection: str, row: dict) -> None:
        data = self._load()
        self._profile(data, profile_id)[collection].append(row)
        self._save(data)

    def _rows(self, profile_id: str, collection: str, order_key: str) -> List[dict]:
        profile = self._load()["profiles"].get(profile_id)
        if not profile:
            return []
        return sorted(profile[collection], key=lambda row: row[order_key], reverse=True)

    def save_lead_interaction(self, interaction: LeadInteraction) -> None:
        data = self._load()
        row = interaction.model_dump(mode="json")
        row["created_at"] = datetime.now(timezone.utc).isoformat()
        data["lead_interactions"].append(row)
        self._save(data)
        logger.info("Stored lead interaction for %s", interaction.lead_id)

    def list_lead_interactions(self) -> List[LeadInteraction]:
        return [LeadInteraction(**row) for row in self._load()["lead_interactions"]]

    def save_member_assessment(self, profile_id: str, entry: MemberAssessmentEntry) -> MemberAssessmentEntry:
        stored = entry.model_copy(update={
            "id": entry.id or str(uuid.uuid4()),
            "created_at": entry.created_at or datetime.now(timezone.utc),
        })
        self._append(profile_id, "assessments", stored.model_dump(mode="json"))
        return stored

    def add_metric(self, profile_id: str, sample: MetricSample) -> None:
        self._append(profile_id, "metrics", sample.model_dump(mode="json"))

    def add_vitals(self, profile_id: str, sample: VitalsSample) -> None:
        self._append(profile_id, "vitals", sample.model_dump(mode="json"))

    def list_metrics(self, profile_id: str) -> List[MetricSample]:
        return self._parse(MetricSample, self._rows(profile_id, "metrics", "measured_at"))

    def list_vitals(self, profile_id: str) -> List[VitalsSample]:
        return self._parse(VitalsSample, self._rows(profile_id, "vitals", "measured_at"))

    def list_member_assessments(self, profile_id: str) -> List[MemberAssessmentEntry]:
        return self._parse(MemberAssessmentEntry, self._rows(profile_id, "assessments", "created_at"))

    @staticmethod
    def _parse(model_cls, rows: List[dict]) -> list:
        try:
            return [model_cls(**row) for row in rows]
        except ValidationError as e:
            raise PersistenceError(f"Malformed {model_cls.__name__} row in store: {e}") from e
