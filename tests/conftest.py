"""Shared fixtures: an offscreen Qt application and fake collaborators."""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QImage
from PyQt6.QtWidgets import QApplication

from playful_environment.events.event_bus import EventBus
from playful_environment.services import CollaboratorServices, GeneratedImage, GeocodeResult, ScoreResult


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def event_bus():
    return EventBus()


def solid_image(width, height, color="#ffffff", fmt=QImage.Format.Format_ARGB32_Premultiplied):
    image = QImage(width, height, fmt)
    image.fill(QColor(color))
    return image


def transparent_image(width, height):
    image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(Qt.GlobalColor.transparent)
    return image


class ImmediatePool:
    """Runs tasks synchronously on start()."""

    def __init__(self):
        self.started = []

    def start(self, task):
        self.started.append(task)
        task.run()


class DeferredPool:
    """Holds tasks until the test runs them."""

    def __init__(self):
        self.tasks = []

    def start(self, task):
        self.tasks.append(task)


class FakeSuggestions:
    is_configured = True

    def __init__(self):
        self.prompts = []

    def suggest(self, prompt):
        self.prompts.append(prompt)
        return f"suggestion for: {prompt}"


class FakeDescriptions:
    is_configured = True

    def __init__(self, text="A paved plaza with two trees."):
        self.text = text
        self.calls = []

    def describe(self, image_data_url, prompt=None):
        self.calls.append(image_data_url)
        return self.text


class FakeConcepts:
    is_configured = True

    def __init__(self, result=None, error=None):
        self.result = result or GeneratedImage(image_base64="aGVsbG8=")
        self.error = error
        self.calls = []

    def generate(self, prompt, payload):
        self.calls.append((prompt, payload))
        if self.error is not None:
            raise self.error
        return self.result


class FakeInterventions:
    is_configured = True

    def __init__(self, result=None):
        self.result = result or ScoreResult(
            matches=2, averages={"cost": 2.5, "ease": 4.0, "effectiveness": 3.0}
        )
        self.calls = []

    def score(self, prompt='', location=''):
        self.calls.append((prompt, location))
        return self.result


class FakeGeocoder:
    def __init__(self):
        self.calls = []

    def reverse(self, lat, lon):
        self.calls.append((lat, lon))
        return GeocodeResult(display_name="Somewhere", address={"city": "Lisbon", "country": "Portugal"})


@pytest.fixture
def fake_services():
    return CollaboratorServices(
        suggestions=FakeSuggestions(),
        descriptions=FakeDescriptions(),
        concepts=FakeConcepts(),
        interventions=FakeInterventions(),
        geocoder=FakeGeocoder(),
    )
