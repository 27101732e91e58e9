from resume_patcher.package import CONTENT_TYPES_PART, MAIN_PART
from resume_patcher.validation import Level, validate

from docx_builders import build_docx


def test_valid_package_has_no_issues(resume_docx):
    report = validate(resume_docx, expected_texts=["PROFESSIONAL EXPERIENCE"])

    assert report.valid
    assert report.errors == []
    assert report.warnings == []


def test_invalid_zip_is_reported():
    report = validate(b"not a zip")

    assert not report.valid
    assert report.errors[0].check == "zip"


def test_missing_required_entries_are_errors():
    report = validate(build_docx(omit={CONTENT_TYPES_PART}))

    assert [issue.check for issue in report.errors] == ["entries"]
    assert CONTENT_TYPES_PART in report.errors[0].message


def test_malformed_part_is_reported():
    report = validate(build_docx(extra={"word/footer1.xml": "<w:ftr>"}))

    assert any(issue.check == "xml" and "word/footer1.xml" in issue.message for issue in report.errors)


def test_wrong_root_element_is_reported():
    document = '<w:body xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"/>'

    report = validate(build_docx(document=document))

    checks = {issue.check for issue in report.errors}
    assert checks == {"structure"}
    assert len(report.errors) == 2


def test_auto_generated_prefixes_are_warnings():
    document = (
        '<ns0:document xmlns:ns0="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        "<ns0:body/></ns0:document>"
    )

    report = validate(build_docx(document=document))

    assert report.valid
    assert report.warnings[0].check == "namespace"


def test_missing_expected_text_is_a_warning(resume_docx):
    report = validate(resume_docx, expected_texts=["Acme Corp (Driver)"], main_part=MAIN_PART)

    assert report.valid
    assert [issue.check for issue in report.warnings] == ["content"]


def test_issues_are_filed_by_level(resume_docx):
    report = validate(build_docx(omit={CONTENT_TYPES_PART}, extra={"word/footer1.xml": "<w:ftr>"}))

    assert report.errors
    assert all(issue.level is Level.ERROR for issue in report.errors)

    report = validate(resume_docx, expected_texts=["Acme Corp (Driver)"])

    assert [issue.level for issue in report.warnings] == [Level.WARNING]
