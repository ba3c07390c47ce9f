"""
Seed the local stores with a small caseload and run the backend server.

This script:
1. Adds students to the LocalStudentDirectory
2. Adds recurring weekly sessions (one group, one delegated to a SEA) to the LocalSessionStore
3. Prints a bearer token for the demo provider
4. Starts the FastAPI backend server
"""

from caseload_planner.application.api import app, session_store, student_directory
from caseload_planner.application.config import settings
from caseload_planner.application.identity import issue_token
from caseload_planner.domain.entities import (
    DeliveredBy,
    ScheduleSession,
    Student,
    TenantScope,
    UserIdentity,
    UserRole,
)

PROVIDER_ID = "provider-001"
SEA_ID = "sea-001"
SCHOOL_ID = "school-001"


def setup_sample_data() -> str:
    """Set up sample students and sessions; return the provider's token."""

    print("=" * 60)
    print("Setting up sample data...")
    print("=" * 60)

    students = [
        Student(id="student-001", initials="AJ", grade_level="2"),
        Student(id="student-002", initials="MR", grade_level="2"),
        Student(id="student-003", initials="TK", grade_level="4"),
    ]
    for student in students:
        student_directory.add_student(student)
        print(f"\n✓ Added student: {student.initials} (grade {student.grade_level})")

    # Monday reading group and a Wednesday session delegated to a SEA
    for student in students[:2]:
        session_store.add_session(ScheduleSession(
            id=f"template-mon-{student.id}",
            provider_id=PROVIDER_ID,
            student_id=student.id,
            day_of_week=1,
            start_time="09:00",
            end_time="09:30",
            group_id="reading-group-a",
            group_name="Reading Group A",
            service_type="resource",
        ))
    session_store.add_session(ScheduleSession(
        id="template-wed-student-003",
        provider_id=PROVIDER_ID,
        student_id="student-003",
        assigned_to_sea_id=SEA_ID,
        delivered_by=DeliveredBy.SEA,
        day_of_week=3,
        start_time="10:15",
        end_time="10:45",
        service_type="resource",
    ))
    print("\n✓ Added 3 recurring sessions")

    provider = UserIdentity(user_id=PROVIDER_ID, role=UserRole.RESOURCE, scope=TenantScope(school_id=SCHOOL_ID))
    token = issue_token(provider, settings.jwt_secret, settings.jwt_algorithm)

    print("\n" + "=" * 60)
    print("Sample data setup complete!")
    print("=" * 60)
    print("\nYou can now:")
    print("1. Open http://localhost:8000/docs")
    print(f"2. Send header: Authorization: Bearer {token}")
    print("3. GET /calendar/week?view_mode=all-sessions")
    print("\n" + "=" * 60 + "\n")
    return token


def run_server():
    """Run the FastAPI server."""
    import uvicorn

    # Setup sample data first
    setup_sample_data()

    # Start the server
    print(f"Starting FastAPI server on http://localhost:{settings.api_port}")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info"
    )


if __name__ == "__main__":
    run_server()
