import logging

from sqlalchemy import func, select

from models import db, unit_of_work, Task

DEMO_TASKS = [
    {
        'title': 'Plant a Sapling',
        'description': 'Plant a sapling in your home, hostel, or neighbourhood and water it regularly.',
        'category': 'Plantation',
        'points': 20,
        'expected_labels': ['tree', 'plant', 'garden'],
    },
    {
        'title': 'Clean Your Classroom Area',
        'description': 'Collect litter around your classroom or lab and put it in the dustbin.',
        'category': 'Waste Management',
        'points': 15,
        'expected_labels': ['trash', 'litter', 'bin'],
    },
    {
        'title': 'Cycle or Walk to College',
        'description': 'Use a bicycle or walk instead of a motorbike for at least one trip to college.',
        'category': 'Energy Saving',
        'points': 25,
        'expected_labels': ['bicycle', 'bike', 'cycle'],
    },
]


def seed_demo_tasks():
    """
    Inserts the demo tasks when the catalog is empty.
    Returns the number of tasks created (0 if tasks already existed).
    """
    existing = db.session.execute(select(func.count(Task.id))).scalar_one()
    if existing > 0:
        return 0

    with unit_of_work() as session:
        for task_data in DEMO_TASKS:
            session.add(Task(**task_data))

    logging.info(f"Inserted {len(DEMO_TASKS)} demo eco tasks")
    return len(DEMO_TASKS)


if __name__ == "__main__":
    from main import create_app

    app = create_app({'SEED_DEMO_TASKS': False})
    with app.app_context():
        created = seed_demo_tasks()
    print(f"Demo tasks created: {created}")
