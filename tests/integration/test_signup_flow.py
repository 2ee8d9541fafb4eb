"""End-to-end signup flow: YAML definition -> user input -> endpoint."""

import asyncio
import json

import httpx

from forms import FileRef, SubmissionPhase, SubmitStatus, load_form


def test_signup_flow(tmp_path, monkeypatch):
    monkeypatch.setenv("SIGNUP_TOKEN", "t0ken")
    definition_path = tmp_path / "signup.yaml"
    definition_path.write_text(
        """\
form:
  name: signup
  endpoint: https://hooks.example.com/signup
  headers:
    Authorization: Bearer ${SIGNUP_TOKEN}
  showSuccessMessage: true
  resetOnSubmit: true

fields:
  - name: email
    type: email
    label: Email
    validation: {required: true, validationType: email}
  - name: password
    type: password
    validation: {required: true, minLength: 8}
  - name: confirm
    type: password
    validation: {matches: password, matchMessage: Passwords do not match}
  - name: plan
    type: radio
    defaultValue: free
    options: [free, pro]
  - name: invoice_email
    type: email
    dependsOn: {field: plan, value: pro}
  - name: avatar
    type: file
    accept: image/*
""",
        encoding="utf-8",
    )

    requests = []

    def endpoint(request):
        requests.append(request)
        return httpx.Response(201, json={"status": "created"})

    form = load_form(definition_path).create_controller(transport=httpx.MockTransport(endpoint))

    # Typing into an untouched field does not show errors yet
    form.change("email", "ada@")
    assert form.view().fields[0].error is None
    form.blur("email")
    assert form.view().fields[0].error == "Invalid email format"

    form.change("email", "ada@example.com")
    form.change("password", "analytical")
    form.change("confirm", "analytic")
    form.blur("confirm")
    assert form.state.errors["confirm"] == "Passwords do not match"
    form.change("confirm", "analytical")
    assert form.state.errors["confirm"] is None

    assert not form.is_visible("invoice_email")
    form.change("plan", "pro")
    assert form.is_visible("invoice_email")

    form.change("avatar", FileRef.from_bytes("me.png", b"\x89PNG", "image/png"))

    result = asyncio.run(form.submit())

    assert result.status == SubmitStatus.SUCCEEDED
    assert result.result == {"status": "created"}
    assert form.state.phase == SubmissionPhase.SUCCEEDED
    assert form.view().banner == "Form submitted successfully!"

    body = json.loads(requests[0].content)
    assert requests[0].headers["Authorization"] == "Bearer t0ken"
    assert body["email"] == "ada@example.com"
    assert body["plan"] == "pro"
    assert body["avatar"]["mediaType"] == "image/png"
    assert body["avatar"]["encodedData"].startswith("data:image/png;base64,")

    # resetOnSubmit
    assert form.value("email") == ""
    assert form.value("plan") == "free"
    assert form.value("avatar") is None
    assert form.state.touched_fields() == []

    # The next edit clears the success banner
    form.change("email", "grace@example.com")
    assert form.view().banner is None
