"""
Test data generator for the Conduit suite.
"""
import random
import re
import string
from typing import List, Optional

from faker import Faker

from conduit_e2e.models import ArticleData, Credentials, SignupData, UserSettings

fake = Faker()

INVALID_EMAILS = [
    "invalid-email",
    "test@",
    "@test.com",
    "test..test@example.com",
    "test@test",
    "",
]


class DataGenerator:
    """Generate random users, articles and form inputs."""

    @staticmethod
    def generate_username(max_length: int = 20) -> str:
        """Lowercase alphanumeric username with a numeric suffix for uniqueness."""
        base = re.sub(r"[^a-z0-9]", "", fake.user_name().lower())
        suffix = str(random.randint(1000, 99999))
        return f"{base[: max_length - len(suffix)]}{suffix}"

    @staticmethod
    def generate_signup_data() -> SignupData:
        username = DataGenerator.generate_username()
        return SignupData(
            username=username,
            email=f"{username}@{fake.free_email_domain()}",
            password=DataGenerator.generate_password(),
        )

    @staticmethod
    def generate_credentials() -> Credentials:
        return Credentials(email=fake.email(), password=DataGenerator.generate_password())

    @staticmethod
    def generate_password(length: int = 12) -> str:
        return fake.password(length=length, special_chars=True, digits=True, upper_case=True)

    @staticmethod
    def generate_article_data(tag: Optional[str] = None) -> ArticleData:
        """
        Generate a random article with one to three tags.

        When ``tag`` is given it is placed first in the tag list.
        """
        tags = DataGenerator.generate_tags(random.randint(1, 3))
        if tag:
            tags = [tag] + [t for t in tags if t != tag][:2]

        return ArticleData(
            title=fake.sentence(nb_words=random.randint(3, 8)).rstrip(".")[:100],
            description=fake.sentence(nb_words=random.randint(5, 15)),
            body="\n\n".join(fake.paragraphs(nb=random.randint(2, 5))),
            tags=tags,
        )

    @staticmethod
    def generate_user_settings() -> UserSettings:
        return UserSettings(
            image=fake.image_url(),
            bio=fake.paragraph(nb_sentences=2),
        )

    @staticmethod
    def generate_tag() -> str:
        return fake.word().lower()

    @staticmethod
    def generate_tags(count: int = 3) -> List[str]:
        return fake.words(nb=count, unique=True)

    @staticmethod
    def generate_string(length: int = 10) -> str:
        return "".join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def generate_invalid_email() -> str:
        return random.choice(INVALID_EMAILS)

    @staticmethod
    def generate_long_string(length: int = 1000) -> str:
        return "a" * length

    @staticmethod
    def generate_short_string(length: int = 1) -> str:
        return "a" * length
