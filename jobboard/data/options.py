"""Suggested values for dropdowns.

These are advertised to clients through the options endpoints. Job fields
that use them are stored as free text and are never validated against
these lists; job seeker profile fields are.
"""

GENDER_OPTIONS = ["male", "female", "other"]

NOTICE_PERIOD_OPTIONS = ["Immediate Joiner", "Upto 1 week", "Upto 1 month", "Upto 2 month", "Any"]

SEEKER_EXPERIENCE_OPTIONS = [
    "Fresher",
    "0-1 year of experience",
    "1-2 year of experience",
    "2-4 year of experience",
    "5+ year of experience",
    "10+ year of experience",
]

CATEGORY_OPTIONS = [
    "IT & Networking",
    "Sales & Marketing",
    "Accounting",
    "Data Science",
    "Digital Marketing",
    "Human Resource",
    "Customer Service",
    "Project Manager",
    "Other",
]

EDUCATION_OPTIONS = [
    "High School (10th)",
    "Higher Secondary (12th)",
    "Diploma",
    "Bachelor of Arts (BA)",
    "Bachelor of Science (BSc)",
    "Bachelor of Commerce (BCom)",
    "Bachelor of Technology (BTech)",
    "Bachelor of Engineering (BE)",
    "Bachelor of Computer Applications (BCA)",
    "Bachelor of Business Administration (BBA)",
    "Master of Arts (MA)",
    "Master of Science (MSc)",
    "Master of Commerce (MCom)",
    "Master of Technology (MTech)",
    "Master of Engineering (ME)",
    "Master of Computer Applications (MCA)",
    "Master of Business Administration (MBA)",
    "PhD (Doctorate)",
    "Other",
]

JOB_TYPE_OPTIONS = ["Full-time", "Part-time"]
INTERVIEW_TYPE_OPTIONS = ["Online", "On-site", "Walk-in"]
WORK_TYPE_OPTIONS = ["Remote", "On-site", "Hybrid"]
JOB_EXPERIENCE_LEVEL_OPTIONS = SEEKER_EXPERIENCE_OPTIONS[:5]
SHIFT_OPTIONS = ["Day", "Night"]

VERIFIED = "verified"
NOT_VERIFIED = "not verified"
VERIFICATION_STATUS_OPTIONS = [VERIFIED, NOT_VERIFIED]

APPLICATION_STATUS_OPTIONS = ["pending", "reviewed", "interview", "accepted", "rejected"]

DEFAULT_JOB_TYPE = "Full-time"
DEFAULT_SALARY_CURRENCY = "INR"
WALK_IN = "Walk-in"


def profile_options() -> dict[str, list[str]]:
    return {
        "gender": list(GENDER_OPTIONS),
        "noticePeriod": list(NOTICE_PERIOD_OPTIONS),
        "expInWork": list(SEEKER_EXPERIENCE_OPTIONS),
        "preferredCategory": list(CATEGORY_OPTIONS),
        "highestEducation": list(EDUCATION_OPTIONS),
    }


def job_options() -> dict[str, list[str]]:
    return {
        "jobType": list(JOB_TYPE_OPTIONS),
        "interviewType": list(INTERVIEW_TYPE_OPTIONS),
        "workType": list(WORK_TYPE_OPTIONS),
        "experienceLevel": list(JOB_EXPERIENCE_LEVEL_OPTIONS),
        "noticePeriod": list(NOTICE_PERIOD_OPTIONS),
        "category": list(CATEGORY_OPTIONS),
        "shift": list(SHIFT_OPTIONS),
        "verificationStatus": list(VERIFICATION_STATUS_OPTIONS),
    }
