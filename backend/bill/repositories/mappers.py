"""Conversions between ORM rows and domain entities."""

from bill import models
from bill.domain.entities import Family, User, UserProfile


class UserMapper:
    @staticmethod
    def to_domain(row: models.User) -> User:
        return User.create(
            id=row.id,
            email=row.email,
            is_super_admin=row.is_super_admin,
            email_confirmed_at=row.email_confirmed_at,
        )

    @staticmethod
    def to_model(user: User) -> models.User:
        return models.User(
            id=user.id,
            email=user.email,
            is_super_admin=user.is_super_admin,
            email_confirmed_at=user.email_confirmed_at,
        )


class UserProfileMapper:
    @staticmethod
    def to_domain(row: models.UserProfile) -> UserProfile:
        return UserProfile.create(
            id=row.id,
            serial=row.serial,
            name=row.name,
            surname=row.surname,
            birth_date=row.birth_date,
            user_id=row.user_id,
        )

    @staticmethod
    def to_model(profile: UserProfile) -> models.UserProfile:
        # id and serial are left to the database/column defaults when unset
        values = {
            "name": profile.name,
            "surname": profile.surname,
            "birth_date": profile.birth_date,
            "user_id": profile.user_id,
        }
        if profile.id is not None:
            values["id"] = profile.id
        if profile.serial is not None:
            values["serial"] = profile.serial
        return models.UserProfile(**values)


class FamilyMapper:
    @staticmethod
    def to_domain(row: models.Family) -> Family:
        return Family.create(id=row.id, name=row.name, user_id=row.user_id)

    @staticmethod
    def to_model(family: Family) -> models.Family:
        row = models.Family(name=family.name, user_id=family.user_id)
        if family.id is not None:
            row.id = family.id
        return row
