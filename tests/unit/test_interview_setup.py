from __future__ import annotations

import pytest
from pydantic import ValidationError

from interview_setup import InterviewConfig, UnsupportedResumeType, accept_resume_upload, clear_resume


def _payload(**overrides):
    body = {
        "name": "Asha",
        "branch": "CSE",
        "role": "SDE",
        "experienceLevel": "Fresher",
        "interestField": "Web",
        "interviewType": "HR",
        "interviewLevel": "Beginner",
    }
    body.update(overrides)
    return body


def test_camel_case_payload_is_accepted_and_normalised():
    config = InterviewConfig.model_validate(_payload())
    assert config.interview_type == "hr"
    assert config.interview_level == "beginner"
    assert config.resume == ""
    assert config.is_coding is False


@pytest.mark.parametrize("field", ["name", "branch", "role", "experienceLevel", "interestField"])
def test_blank_required_field_is_rejected(field):
    with pytest.raises(ValidationError):
        InterviewConfig.model_validate(_payload(**{field: "   "}))


def test_unknown_interview_type_is_rejected():
    with pytest.raises(ValidationError):
        InterviewConfig.model_validate(_payload(interviewType="panel"))


def test_config_is_frozen():
    config = InterviewConfig.model_validate(_payload())
    with pytest.raises(ValidationError):
        config.role = "Other"


def test_text_upload_reads_content():
    upload = accept_resume_upload("cv.txt", "text/plain", "Python developer".encode("utf-8"))
    assert upload.resume == "Python developer"
    assert upload.resume_file_name == "cv.txt"


def test_pdf_upload_keeps_name_only():
    upload = accept_resume_upload("cv.pdf", "application/pdf", b"%PDF-1.4")
    assert upload.resume == ""
    assert upload.resume_file_name == "cv.pdf"
    assert "paste your resume text" in upload.notice


def test_other_upload_types_are_rejected():
    with pytest.raises(UnsupportedResumeType):
        accept_resume_upload("cv.png", "image/png", b"\x89PNG")


def test_clear_resume_drops_text_and_ats_result():
    config = InterviewConfig.model_validate(_payload(resume="text", resumeFileName="cv.txt"))
    cleared, ats = clear_resume(config)
    assert cleared.resume == ""
    assert cleared.resume_file_name is None
    assert ats is None
    assert config.resume == "text"
