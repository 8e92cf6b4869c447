from services.workspace_service import WorkspaceService
from ui.components.form_dialog import FormDialog


class TuitionSetupDialog(FormDialog):
    """Asks for the tuition center name before the tuition workspace opens."""

    def __init__(self, master, workspace_service: WorkspaceService, **kwargs):
        super().__init__(master, "Set Up Tuition Center", **kwargs)
        self._svc = workspace_service
        self._add_hint("Please provide your tuition center name to start managing "
                       "students and fees, e.g. ABC Learning Center.")
        self._name_var = self._add_entry("Center Name:")
        self._add_hint("You can change this name later in Settings.")
        self._finish(save_text="Continue")

    def _on_save(self):
        self._submit(lambda: self._svc.setup_tuition_center(self._name_var.get()))
