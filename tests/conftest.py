"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from forms.models.field import FieldDescriptor  # noqa: E402


SIGNUP_YAML = """\
form:
  name: signup
  submitText: Create account
  show_success_message: true

fields:
  - name: name
    type: text
    label: Name
    validation:
      required: true
  - name: email
    type: email
    label: Email
    validation:
      required: true
      validation_type: email
  - name: password
    type: password
    label: Password
    validation:
      required: true
      minLength: 8
  - name: confirm
    type: password
    label: Confirm password
    validation:
      matches: password
  - name: role
    type: select
    defaultValue: user
    options:
      - user
      - {label: Administrator, value: admin}
  - name: admin_code
    type: text
    dependsOn: {field: role, value: admin}
  - name: terms
    type: checkbox
    label: I accept the terms
    validation:
      required: true
"""


@pytest.fixture
def signup_config():
    """Provide a signup form definition as parsed YAML would produce it."""
    return {
        "form": {"name": "signup"},
        "fields": [
            {"name": "name", "type": "text", "label": "Name", "validation": {"required": True}},
            {
                "name": "email",
                "type": "email",
                "label": "Email",
                "validation": {"required": True, "validation_type": "email"},
            },
            {
                "name": "password",
                "type": "password",
                "label": "Password",
                "validation": {"required": True, "min_length": 8},
            },
            {
                "name": "confirm",
                "type": "password",
                "label": "Confirm password",
                "validation": {"matches": "password"},
            },
            {
                "name": "role",
                "type": "select",
                "default_value": "user",
                "options": ["user", {"label": "Administrator", "value": "admin"}],
            },
            {
                "name": "admin_code",
                "type": "text",
                "depends_on": {"field": "role", "value": "admin"},
            },
            {
                "name": "terms",
                "type": "checkbox",
                "label": "I accept the terms",
                "validation": {"required": True},
            },
        ],
    }


@pytest.fixture
def signup_fields(signup_config):
    """Signup form field descriptors."""
    return [FieldDescriptor.from_dict(f) for f in signup_config["fields"]]


@pytest.fixture
def valid_signup_values():
    """Values that pass every signup rule."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "analytical",
        "confirm": "analytical",
        "role": "user",
        "terms": True,
    }


@pytest.fixture
def signup_yaml(tmp_path):
    """Write the signup definition to a temporary YAML file."""
    path = tmp_path / "signup.yaml"
    path.write_text(SIGNUP_YAML, encoding="utf-8")
    return path
