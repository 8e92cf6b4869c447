import customtkinter as ctk

from models.student import Student
from services.workspace_service import WorkspaceService
from ui.components.date_picker import DatePickerWidget
from ui.components.form_dialog import FormDialog
from utils.constants import STUDENT_CLASSES, STUDENT_SUBJECTS
from utils.date_helpers import today_str


class StudentForm(FormDialog):
    """Add or edit a tuition student."""

    def __init__(self, master, workspace_service: WorkspaceService,
                 student: Student | None = None, date_format: str = "MM/DD/YYYY", **kwargs):
        super().__init__(master, "Edit Student" if student else "Add Student", **kwargs)
        self._svc = workspace_service
        self._student = student

        self._name_var = self._add_entry("Student Name:", student.name if student else "")
        self._phone_var = self._add_entry("Phone:", student.phone if student else "")
        self._guardian_var = self._add_entry(
            "Guardian Phone:", student.guardian_phone if student else "",
        )

        classes = list(STUDENT_CLASSES)
        if student and student.class_name and student.class_name not in classes:
            classes.append(student.class_name)
        self._class_var, _ = self._add_combo(
            "Class / Grade:", classes, student.class_name if student else "",
        )

        chosen = set(student.subjects) if student else set()
        subjects_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._subject_vars: dict[str, ctk.BooleanVar] = {}
        for i, subject in enumerate(STUDENT_SUBJECTS):
            var = ctk.BooleanVar(value=subject in chosen)
            self._subject_vars[subject] = var
            ctk.CTkCheckBox(
                subjects_frame, text=subject, variable=var, width=120,
                checkbox_width=18, checkbox_height=18,
            ).grid(row=i // 2, column=i % 2, padx=2, pady=2, sticky="w")
        self._add_widget("Subjects:", subjects_frame, sticky="w")

        self._fee_var = self._add_entry(
            "Monthly Fee:", f"{student.monthly_fee:.0f}" if student else "",
        )
        self._discount_var = self._add_entry(
            "Discount:", f"{student.discount:.0f}" if student else "0",
        )
        self._admission_var = self._add_entry(
            "Admission Fee:", f"{student.admission_fee:.0f}" if student else "0",
        )
        self._start_picker = self._add_widget("Start Date:", DatePickerWidget(
            self, student.start_date if student else today_str(), date_format,
        ), sticky="w")

        if student:
            self._status_var, _ = self._add_combo(
                "Status:", ["active", "inactive"], student.status,
            )

        self._finish(save_text="Save Student")

    def _on_save(self):
        fee = self._parse_amount(self._fee_var, "monthly fee", allow_zero=True)
        if fee is None:
            return
        discount = self._parse_amount(self._discount_var, "discount", allow_zero=True)
        if discount is None:
            return
        admission = self._parse_amount(self._admission_var, "admission fee", allow_zero=True)
        if admission is None:
            return
        if self._start_picker.get() and not self._start_picker.is_valid():
            self._error_var.set("Invalid start date.")
            return

        fields = dict(
            name=self._name_var.get(),
            monthly_fee=fee,
            discount=discount,
            phone=self._phone_var.get(),
            guardian_phone=self._guardian_var.get(),
            class_name=self._class_var.get(),
            subjects=[s for s, var in self._subject_vars.items() if var.get()],
            admission_fee=admission,
            start_date=self._start_picker.get() or None,
        )
        if self._student:
            self._submit(lambda: self._svc.update_student(
                self._student.id, status=self._status_var.get(), **fields,
            ))
        else:
            self._submit(lambda: self._svc.add_student(**fields))
