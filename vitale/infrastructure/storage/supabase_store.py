import logging
from typing import List, Optional

import httpx
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import Client, create_client

from vitale.application.ports import HealthRecordRepository, PersistenceError
from vitale.application.schemas import LeadInteraction, MemberAssessmentEntry
from vitale.domain.models import MetricSample, VitalsSample
from vitale.infrastructure.config import Settings


logger = logging.getLogger(__name__)


class SupabaseHealthStore(HealthRecordRepository):
    """Reads and writes the health tables through the Supabase client."""

    def __init__(self, settings: Settings | None = None, client: Optional[Client] = None):
        self.settings = settings or Settings()
        self._client = client
        if client is None and not (self.settings.supabase_url and self.settings.supabase_anon_key):
            logger.error("Supabase URL or anon key is missing.")

    @property
    def client(self) -> Client:
        if self._client is None:
            url = self.settings.supabase_url
            key = self.settings.supabase_anon_key
            if not url or not key:
                raise PersistenceError("Supabase client not configured (missing URL or anon key)")
            try:
                self._client = create_client(url, key)
            except Exception as e:
                raise PersistenceError(f"Could not create Supabase client: {e}") from e
        return self._client

    def _insert(self, table: str, row: dict) -> List[dict]:
        try:
            response = self.client.table(table).insert(row).execute()
        except (APIError, httpx.HTTPError) as e:
            raise PersistenceError(f"Insert into {table} failed: {e}") from e
        return response.data or []

    def _select(self, table: str, profile_id: str, order_column: str) -> List[dict]:
        try:
            response = (
                self.client.table(table)
                .select("*")
                .eq("profile_id", profile_id)
                .order(order_column, desc=True)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise PersistenceError(f"Query on {table} failed: {e}") from e
        return response.data or []

    def save_lead_interaction(self, interaction: LeadInteraction) -> None:
        self._insert("lead_interactions", interaction.model_dump(mode="json"))

    def save_member_assessment(self, profile_id: str, entry: MemberAssessmentEntry) -> MemberAssessmentEntry:
        row = entry.model_dump(mode="json", exclude={"id", "created_at"})
        row["profile_id"] = profile_id
        created = self._insert("health_assessments", row)
        if not created:
            return entry
        try:
            return MemberAssessmentEntry(**created[0])
        except ValidationError as e:
            raise PersistenceError(f"Unexpected health_assessments row: {e}") from e

    def add_metric(self, profile_id: str, sample: MetricSample) -> None:
        self._insert("health_metrics", {**sample.model_dump(mode="json"), "profile_id": profile_id})

    def add_vitals(self, profile_id: str, sample: VitalsSample) -> None:
        self._insert("vital_signs", {**sample.model_dump(mode="json"), "profile_id": profile_id})

    def list_metrics(self, profile_id: str) -> List[MetricSample]:
        return self._parse(MetricSample, self._select("health_metrics", profile_id, "measured_at"))

    def list_vitals(self, profile_id: str) -> List[VitalsSample]:
        return self._parse(VitalsSample, self._select("vital_signs", profile_id, "measured_at"))

    def list_member_assessments(self, profile_id: str) -> List[MemberAssessmentEntry]:
        return self._parse(MemberAssessmentEntry, self._select("health_assessments", profile_id, "created_at"))

    @staticmethod
    def _parse(model_cls, rows: List[dict]) -> list:
        # Tables carry extra columns (id, profile_id); the models ignore them.
        try:
            return [model_cls(**row) for row in rows]
        except ValidationError as e:
            raise PersistenceError(f"Unexpected {model_cls.__name__} row: {e}") from e
