import logging
from typing import Optional

from api.api_client import ApiError
from api.category_api import CategoryAPI
from api.user_api import UserAPI
from models.category import Category, categories_for
from models.student import Student
from services.tuition_service import TuitionService
from utils import app_config
from utils.constants import WORKSPACES

logger = logging.getLogger(__name__)


class WorkspaceService:
    """Current workspace plus the data cached for it.

    Students are only held while the tuition workspace is selected. The
    user profile is loaded once and replaced on every update.
    """

    def __init__(self, tuition_service: TuitionService, user_api: UserAPI,
                 category_api: CategoryAPI | None = None):
        self._tuition = tuition_service
        self._users = user_api
        self._category_api = category_api
        self._categories: dict[tuple[str, str], list[Category]] = {}
        self.workspace = app_config.get_setting("workspace", "personal")
        if self.workspace not in WORKSPACES:
            self.workspace = "personal"
        self.students: list[Student] = []
        self.students_error: Optional[str] = None
        self.profile: Optional[dict] = None

    @property
    def is_tuition(self) -> bool:
        return self.workspace == "tuition"

    def switch(self, workspace: str):
        if workspace not in WORKSPACES:
            raise ValueError(f"Unknown workspace '{workspace}'.")
        self.workspace = workspace
        app_config.set_setting("workspace", workspace)
        if workspace == "tuition":
            self.load_students()
        else:
            self.students = []
            self.students_error = None

    # ── Students ─────────────────────────────────────────────────────────────

    def load_students(self) -> list[Student]:
        try:
            self.students = [s for s in self._tuition.get_students() if s]
            self.students_error = None
        except ApiError as e:
            logger.warning("Failed to load students: %s", e.message)
            self.students = []
            self.students_error = e.message or "Failed to load students"
        return self.students

    def active_students(self) -> list[Student]:
        return [s for s in self.students if s.is_active]

    def find_student(self, student_id: str) -> Optional[Student]:
        for s in self.students:
            if s.id == student_id:
                return s
        return self._tuition.cached(student_id)

    def add_student(self, **fields) -> Student:
        student = self._tuition.create_student(**fields)
        self.students.append(student)
        return student

    def update_student(self, student_id: str, **fields) -> Student:
        student = self._tuition.update_student(student_id, **fields)
        self._replace(student_id, student)
        return student

    def delete_student(self, student_id: str):
        self._tuition.delete_student(student_id)
        self.students = [s for s in self.students if s.id != student_id]

    def record_payment(self, student_id: str, **payment) -> Optional[Student]:
        student = self._tuition.record_payment(student_id, **payment)
        if student is not None:
            self._replace(student_id, student)
        return student

    def _replace(self, student_id: str, student: Student):
        self.students = [student if s.id == student_id else s for s in self.students]

    # ── Profile ──────────────────────────────────────────────────────────────

    def load_profile(self) -> Optional[dict]:
        try:
            self.profile = self._users.get_profile() or None
        except ApiError as e:
            logger.warning("Failed to load user profile: %s", e.message)
        return self.profile

    def update_profile(self, full_name: str | None = None,
                       tuition_center_name: str | None = None) -> dict:
        if full_name is not None and not full_name.strip():
            raise ValueError("Full name cannot be empty.")
        self.profile = self._users.update_profile(
            full_name.strip() if full_name is not None else None,
            tuition_center_name.strip() if tuition_center_name is not None else None,
        )
        return self.profile

    @property
    def tuition_center_name(self) -> str:
        return (self.profile or {}).get("tuitionCenterName") or ""

    @property
    def needs_tuition_setup(self) -> bool:
        """True once the profile is loaded and still has no tuition center name."""
        return self.profile is not None and not self.tuition_center_name

    def setup_tuition_center(self, name: str) -> dict:
        if not name.strip():
            raise ValueError("Tuition center name is required")
        return self.update_profile(tuition_center_name=name)

    # ── Categories ───────────────────────────────────────────────────────────

    def load_categories(self):
        """Fetch the server's category lists for the current workspace.

        Failures keep the built-in table; the server is only a refinement.
        """
        if self._category_api is None:
            return
        for type_ in ("income", "expense"):
            try:
                rows = self._category_api.get(self.workspace, type_)
            except ApiError as e:
                logger.warning("Failed to load %s categories: %s", type_, e.message)
                continue
            if rows:
                self._categories[(self.workspace, type_)] = rows

    def categories(self, type_: str) -> list[Category]:
        cached = self._categories.get((self.workspace, type_))
        return cached or categories_for(self.workspace, type_)
