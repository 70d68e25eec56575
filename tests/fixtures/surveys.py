"""Example survey types shared by the unit and CLI tests.

Importable as a CLI target, e.g. ``tests.fixtures.surveys:AppSettings``.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, Field

from survey_builder import Ask, Identifier, Mask, Max, Min, Multiline, Multiselect, Validate, survey
from survey_builder.validation import sum_of_siblings


def total_at_most(limit):
    """Propagated validator: accepted siblings plus the candidate must not exceed `limit`."""

    def check(candidate, answers, path):
        total = sum_of_siblings(answers, path, candidate)
        if total > limit:
            raise ValueError(f"Total {total} exceeds {limit}")

    return check


def strong_password(candidate, answers, path):
    if len(candidate.value) < 8:
        raise ValueError("Password must be at least 8 characters")


class Theme(Enum):
    LIGHT = "Light"
    DARK = "Dark"
    SYSTEM = "Follow the system"


@survey(prelude="Configure the application.", epilogue="Settings saved.")
class AppSettings(BaseModel):
    name: Annotated[str, Ask("Application name:"), Identifier("app-name")]
    port: Annotated[int, Ask("Port:"), Min(1), Max(65535)] = 8080
    ratio: Annotated[float, Ask("Cache ratio:"), Min(0.0), Max(1.0)] = 0.5
    debug: Annotated[bool, Ask("Enable debug mode?")] = False
    data_dir: Annotated[Path, Ask("Data directory:")]
    theme: Annotated[Theme, Ask("Theme:")] = Theme.DARK
    tags: Annotated[List[str], Ask("Tags:")] = []
    notes: Annotated[Optional[str], Ask("Notes:")] = None


@survey(validate_fields=total_at_most(10))
class Budget(BaseModel):
    a: Annotated[int, Ask("A:")]
    b: Annotated[int, Ask("B:")]
    c: Annotated[int, Ask("C:")]


@survey(validate_fields=total_at_most(250))
class Damage(BaseModel):
    base: Annotated[int, Ask("Base damage:"), Min(30), Max(200)]
    bonus: Annotated[int, Ask("Bonus damage:"), Min(0), Max(100)]


class Account(BaseModel):
    username: Annotated[str, Ask("Username:")]
    password: Annotated[str, Ask("Password:"), Mask(), Validate(strong_password)]
    bio: Annotated[str, Ask("Short bio:"), Multiline()] = ""


class Cash(BaseModel):
    pass


@survey(prompt="Credit card")
class CreditCard(BaseModel):
    card_number: Annotated[str, Ask("Card number:")]
    expiry: Annotated[str, Ask("Expiry (MM/YY):")]


class BankTransfer(BaseModel):
    iban: Annotated[str, Ask("IBAN:")]


PaymentMethod = Union[Cash, CreditCard, BankTransfer]


class Address(BaseModel):
    street: Annotated[str, Ask("Street:")]
    city: Annotated[str, Ask("City:")]


class Checkout(BaseModel):
    customer: Annotated[str, Ask("Customer name:")]
    shipping: Address
    payment: Annotated[PaymentMethod, Ask("Payment method:")]


class Item(Enum):
    SWORD = "Sword"
    SHIELD = "Shield"
    POTION = "Potion"
    MAP = "Map"
    ROPE = "Rope"
    TORCH = "Torch"


class Inventory(BaseModel):
    items: Annotated[List[Item], Ask("Pack your bag:"), Multiselect()]


class Dog(BaseModel):
    name: Annotated[str, Ask("Dog's name:")]


class Cat(BaseModel):
    indoor: Annotated[bool, Ask("Indoor cat?")]


class Fish(BaseModel):
    pass


class Household(BaseModel):
    pets: Annotated[List[Union[Dog, Cat, Fish]], Ask("Which pets do you have?"), Multiselect()]


class Bounded(BaseModel):
    level: Annotated[int, Ask("Level:"), Min(1), Max(10)]
    weight: Annotated[float, Ask("Weight:"), Field(ge=0.5, le=2.5)]
    scores: Annotated[List[int], Ask("Scores:"), Min(0), Max(100)] = []


class Described(BaseModel):
    host: str = Field(description="Server host:")
    port: Annotated[int, Ask("Port number:")] = Field(default=22, description="Ignored description")


class Unprompted(BaseModel):
    max_connections: int


class Color(Enum):
    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"


class Paint(BaseModel):
    color: Annotated[Optional[Color], Ask("Colour:")] = None
    payment: Annotated[Optional[PaymentMethod], Ask("Payment method:")] = None


class Playlist(BaseModel):
    title: Annotated[str, Ask("Title:")]
    tracks: Annotated[List[str], Ask("Tracks:")] = Field(default_factory=lambda: ["intro"])
