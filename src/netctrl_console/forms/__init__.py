"""Form state synchronization."""

from netctrl_console.forms.cluster_form import ClusterForm, FormMode

__all__ = ["ClusterForm", "FormMode"]
