"""Sample catalogue seeded into an empty store when SEED_SAMPLE_DATA is enabled.

Three groups of teaching standards, each with a few top-level standards and
their sub-standards.  Only ``code``, ``parent_code`` and ``group`` matter to the
engine; ``children`` and ``level`` are derived on load.
"""

SAMPLE_GROUPS = [
    {"name": "Teaching Standards", "code": "A", "color": "#3498db",
     "description": "Planning and delivering effective lessons"},
    {"name": "Classroom Management", "code": "B", "color": "#2ecc71",
     "description": "Behaviour, environment and use of time"},
    {"name": "Professional Development", "code": "C", "color": "#9b59b6",
     "description": "Reflection, learning and collaboration"},
]


def _std(code, name, description, group):
    parent = code.rsplit(".", 1)[0] if code.count(".") > 1 else None
    return {
        "code": code,
        "name": name,
        "description": description,
        "group": group,
        "parent_code": parent,
    }


_A = "Teaching Standards"
_B = "Classroom Management"
_C = "Professional Development"

SAMPLE_STANDARDS = [
    # ─── A · Teaching Standards ───────────────────────────────────────────
    _std("A.1", "Lesson Planning", "Creates well-structured lesson plans with clear objectives", _A),
    _std("A.1.1", "Learning Objectives", "Defines clear learning objectives for all lessons", _A),
    _std("A.1.1.1", "SMART Objectives", "Creates specific, measurable, achievable objectives", _A),
    _std("A.1.1.2", "Differentiated Objectives", "Adapts objectives for different ability levels", _A),
    _std("A.1.2", "Resource Preparation", "Prepares appropriate resources for all planned activities", _A),
    _std("A.1.2.1", "Digital Resources", "Incorporates relevant digital resources", _A),
    _std("A.1.2.2", "Physical Materials", "Prepares physical materials efficiently", _A),
    _std("A.1.3", "Time Management", "Allocates appropriate time for each activity", _A),
    _std("A.2", "Teaching Delivery", "Delivers content effectively with appropriate methods", _A),
    _std("A.2.1", "Clarity of Explanation", "Explains concepts clearly using appropriate language", _A),
    _std("A.2.1.1", "Visual Aids", "Uses effective visual aids to support explanations", _A),
    _std("A.2.2", "Student Engagement", "Engages students actively in the learning process", _A),
    _std("A.2.3", "Questioning Techniques", "Uses effective questioning to promote deeper thinking", _A),
    _std("A.2.3.1", "Wait Time", "Allows appropriate wait time after questions", _A),
    _std("A.2.3.2", "Question Differentiation", "Tailors questions to different ability levels", _A),
    _std("A.3", "Curriculum Knowledge", "Demonstrates strong knowledge of subject curriculum", _A),
    _std("A.3.1", "Subject Expertise", "Shows depth of subject knowledge", _A),
    _std("A.3.2", "Curriculum Integration", "Connects learning across curriculum areas", _A),
    # ─── B · Classroom Management ─────────────────────────────────────────
    _std("B.1", "Student Behavior", "Manages student behavior effectively", _B),
    _std("B.1.1", "Positive Reinforcement", "Uses positive reinforcement to encourage good behavior", _B),
    _std("B.1.1.1", "Verbal Praise", "Uses specific, meaningful verbal praise", _B),
    _std("B.1.1.2", "Reward Systems", "Implements effective reward systems", _B),
    _std("B.1.2", "Behavior Interventions", "Implements appropriate interventions for disruptive behavior", _B),
    _std("B.1.3", "Classroom Rules", "Establishes and enforces clear classroom rules", _B),
    _std("B.2", "Learning Environment", "Creates a positive and productive learning environment", _B),
    _std("B.2.1", "Physical Space", "Arranges physical space to support learning activities", _B),
    _std("B.2.1.1", "Seating Arrangements", "Uses appropriate seating arrangements for activities", _B),
    _std("B.2.2", "Classroom Climate", "Fosters a positive emotional climate", _B),
    _std("B.3", "Time & Transitions", "Manages instructional time and transitions effectively", _B),
    _std("B.3.1", "Transition Routines", "Establishes efficient routines for transitions", _B),
    _std("B.3.2", "Pacing", "Maintains appropriate instructional pacing", _B),
    # ─── C · Professional Development ─────────────────────────────────────
    _std("C.1", "Professional Growth", "Engages in continuous professional development", _C),
    _std("C.1.1", "Learning Reflection", "Reflects on teaching practice and identifies areas for improvement", _C),
    _std("C.1.1.1", "Self-Assessment", "Conducts regular self-assessment of teaching practice", _C),
    _std("C.1.2", "Professional Learning", "Participates in professional development opportunities", _C),
    _std("C.2", "Collaboration", "Collaborates effectively with colleagues", _C),
    _std("C.2.1", "Team Participation", "Participates actively in team meetings and activities", _C),
    _std("C.2.2", "Resource Sharing", "Shares resources and best practices with colleagues", _C),
]

SAMPLE_STAFF = [
    {"id": "T001", "name": "Sarah Johnson", "phase": "Primary", "overseas_thai": "Overseas",
     "year_group": "Year 3", "department": "Outclass"},
    {"id": "T002", "name": "Somchai Wongsa", "phase": "Secondary", "overseas_thai": "Thai",
     "year_group": "Year 9", "department": "EAL"},
    {"id": "T003", "name": "Emma Clarke", "phase": "Foundation", "overseas_thai": "Overseas",
     "year_group": "Reception", "department": "LSA"},
]
