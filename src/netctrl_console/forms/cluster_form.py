"""Editable form state for creating and updating clusters.

An update form starts empty and is filled in from the server copy of the
cluster the first time that fetch resolves. Fields the user edited before
then keep the user's value. Submitting a create form sends every editable
field; submitting an update form sends only the fields the user edited.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from netctrl_console.domains.clusters.models import Cluster, ClusterCreate, ClusterUpdate
from netctrl_console.models.common import SERVER_OWNED_FIELDS
from netctrl_console.utils.errors import ConsoleError, ValidationError

if TYPE_CHECKING:
    from netctrl_console.console import Console

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description")


class FormMode(str, Enum):
    """Whether the form creates a new cluster or edits an existing one."""

    CREATE = "create"
    UPDATE = "update"


class ClusterForm:
    """Form state for one cluster create or update flow."""

    def __init__(self, cluster_id: str | None = None) -> None:
        self.cluster_id = cluster_id
        self.values: dict[str, Any] = {field: "" for field in EDITABLE_FIELDS}
        self.error: str | None = None
        self.error_field: str | None = None
        self.submitting = False
        self._loaded = False
        self._dirty: set[str] = set()

    @classmethod
    def for_create(cls) -> ClusterForm:
        """Build an empty form for a new cluster."""
        return cls()

    @classmethod
    def for_update(cls, cluster_id: str) -> ClusterForm:
        """Build a form that edits an existing cluster once it is loaded."""
        return cls(cluster_id)

    @property
    def mode(self) -> FormMode:
        return FormMode.UPDATE if self.cluster_id else FormMode.CREATE

    @property
    def loaded(self) -> bool:
        """Whether the server copy has been applied to the form."""
        return self._loaded

    @property
    def touched(self) -> bool:
        """Whether the user has edited any field."""
        return bool(self._dirty)

    @property
    def dirty_fields(self) -> frozenset[str]:
        """Fields the user has edited."""
        return frozenset(self._dirty)

    def set_field(self, name: str, value: str) -> None:
        """Record a user edit."""
        if name not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown cluster form field: {name!r}")
        self.values[name] = value
        self._dirty.add(name)

    def apply_fetched(self, cluster: Cluster) -> bool:
        """Replace the form values with a freshly fetched cluster.

        This happens once. Fields the user already edited keep the user's
        value, so a late fetch never overwrites input.

        Returns:
            True if the fetched values were applied.
        """
        if self._loaded:
            return False

        values = cluster.model_dump()
        if values.get("description") is None:
            values["description"] = ""
        if self._dirty:
            logger.debug(
                f"Keeping edited fields {sorted(self._dirty)} over fetched cluster {cluster.id}"
            )
        for name in self._dirty:
            values[name] = self.values[name]
        self.values = values
        self._loaded = True
        return True

    async def load(self, console: Console) -> Cluster:
        """Fetch the cluster being edited and reconcile it into the form.

        Raises:
            ValueError: If this is a create form.
            TransportError: If the cluster cannot be fetched.
        """
        if self.cluster_id is None:
            raise ValueError("Only update forms load an existing cluster")
        cluster = await console.get_cluster(self.cluster_id)
        self.apply_fetched(cluster)
        return cluster

    def validate(self) -> None:
        """Check the form before anything is sent.

        An update form only checks the name if the user edited it.

        Raises:
            ValidationError: If the name is blank.
        """
        if self.mode == FormMode.UPDATE and "name" not in self._dirty:
            return
        name = self.values.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("name", "Name is required")

    def payload(self) -> dict[str, Any]:
        """Request body for the form.

        Create forms send every editable value; update forms send only the
        edited ones. Server-owned fields and None values are never sent.
        """
        if self.mode == FormMode.CREATE:
            fields = list(self.values)
        else:
            fields = [name for name in EDITABLE_FIELDS if name in self._dirty]
        return {
            key: self.values[key]
            for key in fields
            if key not in SERVER_OWNED_FIELDS and self.values[key] is not None
        }

    async def submit(self, console: Console) -> Cluster:
        """Validate and send the form.

        On failure the message is kept in ``error`` and the values are left
        as entered so the user can fix them and submit again.

        Raises:
            ValidationError: If the form is invalid (nothing is sent).
            ConsoleError: If the server rejects the request.
        """
        self.error = None
        self.error_field = None
        self.submitting = True
        try:
            self.validate()
            payload = self.payload()
            if self.cluster_id is None:
                cluster = await console.create_cluster(ClusterCreate.model_validate(payload))
            else:
                cluster = await console.update_cluster(
                    self.cluster_id, ClusterUpdate.model_validate(payload)
                )
        except ConsoleError as e:
            self.error = e.message
            if isinstance(e, ValidationError):
                self.error_field = e.field
            raise
        finally:
            self.submitting = False

        return cluster
