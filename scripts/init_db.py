"""
Database initialization script
Creates the tables and a demo machine model, machine and sale so the
reminder flow can be exercised locally.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from datetime import timedelta

from primecare.core.database import SessionLocal, engine, Base
from primecare.core.timeutils import utcnow
from primecare.models import MachineModel, Machine, Sale

# Create all tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

DEMO_MODELS = [
    ("JKET Prime 400", "Flat-bed laminator", 12),
    ("JKET Prime 650", "Heavy duty laminator", 24),
]

DEMO_SERIAL = "JKET-DEMO-0001"


def init_machine_models():
    """Create demo machine models"""
    models = {}
    for name, description, warranty_months in DEMO_MODELS:
        model = db.query(MachineModel).filter(MachineModel.name == name).first()
        if not model:
            model = MachineModel(
                name=name,
                description=description,
                warranty_period_months=warranty_months,
            )
            db.add(model)
            db.commit()
            db.refresh(model)
            print(f"[OK] Created machine model: {name} ({warranty_months} months warranty)")
        else:
            print(f"[OK] Machine model already exists: {name}")
        models[name] = model
    return models


def init_demo_machine(model: MachineModel, customer_email: str):
    """Create a sold machine that is due for a reminder today"""
    machine = db.query(Machine).filter(Machine.serial_number == DEMO_SERIAL).first()
    if machine:
        print(f"[OK] Demo machine already exists: {DEMO_SERIAL}")
        return machine

    machine = Machine(
        serial_number=DEMO_SERIAL,
        machine_model_id=model.id,
        manufacturing_date=utcnow() - timedelta(days=120),
    )
    db.add(machine)
    db.commit()
    db.refresh(machine)

    # Sold 83 days ago: with a 90-day interval service is due in 7 days
    sale = Sale(
        machine_id=machine.id,
        sale_date=utcnow() - timedelta(days=83),
        customer_name="Demo Customer",
        customer_email=customer_email,
        customer_phone_number="+910000000000",
    )
    db.add(sale)
    db.commit()
    print(f"[OK] Created demo machine {DEMO_SERIAL} sold to {customer_email}")
    return machine


def main():
    """Run all initialization"""
    print("Initializing database...")
    print()

    models = init_machine_models()
    print()
    customer_email = os.environ.get("DEMO_CUSTOMER_EMAIL", "demo.customer@example.com")
    machine = init_demo_machine(models[DEMO_MODELS[0][0]], customer_email)
    print()

    print("[OK] Database initialization complete!")
    print()
    print("Try a test reminder:")
    print(f"  python scripts/send_test_reminder.py {machine.id} you@example.com")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        db.rollback()
    finally:
        db.close()
