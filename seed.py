"""
Idempotent seed-скрипт.
Запуск:
  python seed.py --reset         # дропнуть и пересоздать БД + демо-данные + admin/admin
  python seed.py --ensure-admin  # создать только пользователя admin/admin (без сидов)
  python seed.py                 # мягкое наполнение недостающих данных (idempotent)
"""
from __future__ import annotations
import argparse
import logging
from datetime import date, timedelta

from app import create_app
from extensions import db
from models import Course, Grade, Group, Role, Student, User, Vote

log = logging.getLogger("seed")

def get_or_create(model, defaults=None, **filters):
    inst = db.session.query(model).filter_by(**filters).first()
    if inst:
        return inst, False
    data = dict(filters)
    if defaults:
        data.update(defaults)
    inst = model(**data)
    db.session.add(inst)
    return inst, True

def ensure_admin(email: str = "admin", password: str = "admin") -> User:
    user = User.query.filter_by(email=email).first()
    if not user:
        user = User(email=email, role=Role.ADMIN.value, is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
    return user

def seed_demo() -> None:
    groups = []
    for name in ("КН-21", "КН-22", "ІПЗ-21"):
        g, _ = get_or_create(Group, name=name)
        groups.append(g)

    courses = []
    for name in ("Математичний аналіз", "Алгоритми", "Бази даних", "Веб-розробка", "Машинне навчання"):
        c, _ = get_or_create(Course, name=name)
        courses.append(c)
    db.session.flush()

    for gi, g in enumerate(groups):
        for i in range(1, 4):
            edebo = f"{gi + 1:02d}{i:06d}"
            s, created = get_or_create(Student, edebo_id=edebo, defaults={
                "date_of_birth": "2004-09-01",
                "order_number": f"ORD-{gi + 1}-{i}",
                "is_full_time": True,
                "group_id": g.id,
            })
            if created:
                s.courses = courses[:3]
                db.session.flush()
                for c in s.courses:
                    db.session.add(Grade(student_id=s.id, course_id=c.id, grade=60 + 10 * (i % 4)))

    if not Vote.query.filter_by(name="Вибіркові дисципліни").first():
        today = date.today()
        db.session.add(Vote(
            name="Вибіркові дисципліни",
            start_date=today,
            end_date=today + timedelta(days=14),
            groups=groups[:2],
            required_courses=courses[:2],
            not_required_courses=courses[3:],
        ))
    db.session.commit()

def main():
    p = argparse.ArgumentParser()
    p.add_argument("--reset", action="store_true", help="drop_all + create_all + seed")
    p.add_argument("--ensure-admin", action="store_true", help="only create admin/admin")
    args = p.parse_args()

    app = create_app("dev")
    with app.app_context():
        if args.reset:
            db.drop_all()
        db.create_all()
        ensure_admin()
        if not args.ensure_admin:
            seed_demo()
        log.info("seed done", extra={"event": "seed_done"})

if __name__ == "__main__":
    main()
