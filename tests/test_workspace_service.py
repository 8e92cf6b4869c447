import pytest

from api.api_client import ApiError
from api.category_api import CategoryAPI
from api.student_api import StudentAPI
from api.tuition_api import TuitionAPI
from api.user_api import UserAPI
from services.tuition_service import TuitionService
from services.workspace_service import WorkspaceService
from utils import app_config

STUDENTS = {"students": [
    {"_id": "s1", "name": "Ali", "monthlyFee": 5000, "status": "active"},
    None,
    {"_id": "s2", "name": "Sara", "monthlyFee": 4000, "status": "inactive"},
]}


def make_service(client):
    tuition = TuitionService(StudentAPI(client), TuitionAPI(client))
    return WorkspaceService(tuition, UserAPI(client))


def test_defaults_to_personal(make_client):
    service = make_service(make_client())
    assert service.workspace == "personal"
    assert service.students == []


def test_switch_to_tuition_loads_students(make_client):
    client = make_client({("GET", "/tuition/students"): STUDENTS})
    service = make_service(client)
    service.switch("tuition")
    assert [s.name for s in service.students] == ["Ali", "Sara"]
    assert [s.name for s in service.active_students()] == ["Ali"]
    assert app_config.get_setting("workspace") == "tuition"


def test_switch_back_clears_students(make_client):
    client = make_client({("GET", "/tuition/students"): STUDENTS})
    service = make_service(client)
    service.switch("tuition")
    service.switch("personal")
    assert service.students == []


def test_workspace_is_remembered(make_client):
    app_config.set_setting("workspace", "tuition")
    assert make_service(make_client()).workspace == "tuition"
    app_config.set_setting("workspace", "garage")
    assert make_service(make_client()).workspace == "personal"


def test_unknown_workspace_rejected(make_client):
    with pytest.raises(ValueError):
        make_service(make_client()).switch("business")


def test_failed_student_load_records_error(make_client):
    client = make_client({("GET", "/tuition/students"): ApiError("Server down", "ERROR", 500)})
    service = make_service(client)
    service.switch("tuition")
    assert service.students == []
    assert service.students_error == "Server down"


def test_student_crud_keeps_list_in_step(make_client):
    client = make_client({
        ("GET", "/tuition/students"): STUDENTS,
        ("POST", "/tuition/students"): {"student": {"_id": "s3", "name": "Zain", "monthlyFee": 3000}},
        ("PUT", "/tuition/students/s1"): {"student": {"_id": "s1", "name": "Ali Khan", "monthlyFee": 5000}},
    })
    service = make_service(client)
    service.switch("tuition")
    service.add_student(name="Zain", monthly_fee=3000)
    service.update_student("s1", name="Ali Khan", monthly_fee=5000)
    service.delete_student("s2")
    assert [s.name for s in service.students] == ["Ali Khan", "Zain"]
    assert service.find_student("s3").name == "Zain"


def test_profile_load_and_update(make_client):
    client = make_client({
        ("GET", "/users/profile"): {"user": {"fullName": "Ayesha", "tuitionCenterName": "Star Academy"}},
        ("PUT", "/users/profile"): {"user": {"fullName": "Ayesha", "tuitionCenterName": "Bright Minds"}},
    })
    service = make_service(client)
    service.load_profile()
    assert service.tuition_center_name == "Star Academy"
    service.update_profile(tuition_center_name=" Bright Minds ")
    assert client.last("PUT", "/users/profile")[2] == {"tuitionCenterName": "Bright Minds"}
    assert service.tuition_center_name == "Bright Minds"



def test_tuition_setup_needed_until_center_is_named(make_client):
    client = make_client({
        ("GET", "/users/profile"): {"user": {"fullName": "Ayesha", "tuitionCenterName": ""}},
        ("PUT", "/users/profile"): {"user": {"fullName": "Ayesha", "tuitionCenterName": "Star Academy"}},
    })
    service = make_service(client)
    assert not service.needs_tuition_setup
    service.load_profile()
    assert service.needs_tuition_setup
    with pytest.raises(ValueError, match="required"):
        service.setup_tuition_center("   ")
    assert client.last("PUT", "/users/profile") is None
    service.setup_tuition_center(" Star Academy ")
    assert client.last("PUT", "/users/profile")[2] == {"tuitionCenterName": "Star Academy"}
    assert not service.needs_tuition_setup

def test_categories_follow_workspace(make_client):
    client = make_client({("GET", "/tuition/students"): STUDENTS})
    service = make_service(client)
    assert "salary" in [c.key for c in service.categories("income")]
    service.switch("tuition")
    assert "student_fee" in [c.key for c in service.categories("income")]


def test_server_categories_override_builtin_table(make_client):
    def categories(query):
        if query["type"] == "expense":
            raise ApiError("down", "NETWORK_ERROR", 0)
        return {"income": [{"key": "bonus", "label": "Bonus"}]}

    client = make_client({("GET", "/categories"): categories})
    tuition = TuitionService(StudentAPI(client), TuitionAPI(client))
    service = WorkspaceService(tuition, UserAPI(client), CategoryAPI(client))
    service.load_categories()
    assert [c.key for c in service.categories("income")] == ["bonus"]
    assert service.categories("income")[0].icon == "📌"
    assert "food" in [c.key for c in service.categories("expense")]
