from xml.etree import ElementTree as ET

import pytest

from resume_patcher.document import parse
from resume_patcher.entry import JobEntry, build_entry, parse_job_details
from resume_patcher.errors import ErrorKind, InvalidJobDetails
from resume_patcher.locator import find_section
from resume_patcher.template import extract_template

from docx_builders import JOB_DETAILS, document_xml, heading, para, run


def _rpr(paragraph):
    runs = paragraph.runs
    if not runs or runs[0].properties is None:
        return None
    return ET.tostring(runs[0].properties)


@pytest.fixture
def template(resume_xml):
    return extract_template(find_section(parse(resume_xml)))


def test_parse_job_details_extracts_bullets():
    job = parse_job_details(JOB_DETAILS)

    assert job == JobEntry(
        title="Acme Corp (Driver)",
        period="JAN 2022-MAR 2023",
        bullets=("Delivered packages on time.", "Maintained vehicle logs."),
    )


def test_parse_job_details_ignores_unmarked_lines():
    job = parse_job_details(
        "\nAcme Corp (Driver)\r\nJAN 2022-MAR 2023\n\nResponsibilities:\n  - Loaded trucks.  \n-no space\n"
    )

    assert job.title == "Acme Corp (Driver)"
    assert job.period == "JAN 2022-MAR 2023"
    assert job.bullets == ("Loaded trucks.",)


@pytest.mark.parametrize("text", ["", "   \n\n", "Acme Corp (Driver)\n\n  \n"])
def test_parse_job_details_requires_two_lines(text):
    with pytest.raises(InvalidJobDetails) as exc_info:
        parse_job_details(text)

    assert exc_info.value.kind is ErrorKind.INVALID_JOB_DETAILS


def test_title_and_period_without_bullets():
    job = parse_job_details("Acme Corp (Driver)\nJAN 2022-MAR 2023")

    assert job.bullets == ()


def test_build_entry_produces_title_period_bullets_and_spacer(template):
    fragment = build_entry(parse_job_details(JOB_DETAILS), template)

    assert [p.text for p in fragment] == [
        "Acme Corp (Driver)",
        "JAN 2022-MAR 2023",
        "• Delivered packages on time.",
        "• Maintained vehicle logs.",
        "",
    ]
    assert all(not p.attached for p in fragment)


def test_build_entry_reuses_donor_formatting(template):
    fragment = build_entry(parse_job_details(JOB_DETAILS), template)
    title, period, bullet, _, spacer = fragment

    assert _rpr(title) == _rpr(template.title)
    assert _rpr(period) == _rpr(template.period)
    assert _rpr(bullet) == _rpr(template.bullet)
    assert _rpr(spacer) == _rpr(template.title)
    assert ET.tostring(bullet.properties) == ET.tostring(template.bullet.properties)


def test_build_entry_without_donor_runs_has_no_run_properties():
    body = heading("Experience") + para(run("Initech (Consultant) 2020")) + para() + para()
    template = extract_template(find_section(parse(document_xml(body))))

    fragment = build_entry(JobEntry("T", "P", ("B",)), template)

    assert fragment[1].runs[0].properties is None
    assert fragment[2].runs[0].properties is None


def test_build_entry_leaves_donors_untouched(template):
    before = [ET.tostring(p.element) for p in (template.title, template.period, template.bullet)]

    build_entry(parse_job_details(JOB_DETAILS), template)
    build_entry(parse_job_details(JOB_DETAILS), template)

    after = [ET.tostring(p.element) for p in (template.title, template.period, template.bullet)]
    assert after == before


def test_build_entry_custom_bullet_prefix(template):
    fragment = build_entry(JobEntry("T", "P", ("Shipped",)), template, bullet_prefix="- ")

    assert fragment[2].text == "- Shipped"
