"""
Default menu and contact rows loaded by scripts/db/seed_options.py.
"""

MAIN_OPTIONS = [
    {"option_id": "courses", "option_text": "Courses",
     "response_text": "Browse the courses we offer.", "sort_order": 1},
    {"option_id": "internships", "option_text": "Internships",
     "response_text": "See current internship opportunities.", "sort_order": 2},
    {"option_id": "contact", "option_text": "Contact",
     "response_text": "Get in touch with the admissions team.", "sort_order": 3},
]

COURSE_OPTIONS = [
    {"option_id": "bsc-computer-science", "option_text": "BSc Computer Science",
     "link_url": "https://www.lsdb.edu/courses/bsc-computer-science", "sort_order": 1},
    {"option_id": "bsc-data-science", "option_text": "BSc Data Science",
     "link_url": "https://www.lsdb.edu/courses/bsc-data-science", "sort_order": 2},
    {"option_id": "msc-artificial-intelligence", "option_text": "MSc Artificial Intelligence",
     "link_url": "https://www.lsdb.edu/courses/msc-artificial-intelligence", "sort_order": 3},
    {"option_id": "mba", "option_text": "MBA",
     "link_url": "https://www.lsdb.edu/courses/mba", "sort_order": 4},
]

INTERNSHIP_OPTIONS = [
    {"option_id": "software-engineering", "option_text": "Software Engineering",
     "link_url": "https://www.lsdb.edu/internships/software-engineering", "sort_order": 1},
    {"option_id": "data-analytics", "option_text": "Data Analytics",
     "link_url": "https://www.lsdb.edu/internships/data-analytics", "sort_order": 2},
    {"option_id": "digital-marketing", "option_text": "Digital Marketing",
     "link_url": "https://www.lsdb.edu/internships/digital-marketing", "sort_order": 3},
]

CONTACT_SETTINGS = [
    {"setting_key": "contact_phone", "setting_value": "+44 20 7123 4567",
     "description": "Main switchboard"},
    {"setting_key": "contact_email", "setting_value": "info@lsdb.edu",
     "description": "General enquiries"},
    {"setting_key": "contact_address", "setting_value": "London, UK",
     "description": "Campus address"},
    {"setting_key": "contact_hours", "setting_value": "Mon-Fri 9:00-17:00",
     "description": "Office hours"},
]


def option_documents():
    """All seed options tagged with their category and marked active."""
    docs = []
    for category, rows in (
        ("main", MAIN_OPTIONS),
        ("courses", COURSE_OPTIONS),
        ("internships", INTERNSHIP_OPTIONS),
    ):
        for row in rows:
            doc = {"response_text": None, "link_url": None, **row}
            doc.update({"category": category, "is_active": True})
            docs.append(doc)
    return docs


def setting_documents():
    return [{**row, "is_active": True} for row in CONTACT_SETTINGS]
