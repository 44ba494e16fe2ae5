import json
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--save-to-json",
        action="store",
        nargs="?",
        const="circuits_json",
        help="Save the constraint summaries of the circuits built by the tests to JSON files in the specified directory",
    )


@pytest.fixture
def save_to_json_folder(request):
    return request.config.getoption("--save-to-json")


@pytest.fixture
def save_summary(save_to_json_folder):
    """Return a function saving the constraint summary of a circuit to `data/<folder>/<package>/<filename>.json`."""

    def save(circuit, package, filename, test_name):
        if not save_to_json_folder:
            return
        output_dir = Path("data") / save_to_json_folder / package
        output_dir.mkdir(parents=True, exist_ok=True)
        json_file = output_dir / f"{filename}.json"

        data = {}

        if json_file.exists():
            with json_file.open("r") as f:
                data = json.load(f)

        data[test_name] = circuit.summary()

        with json_file.open("w") as f:
            json.dump(data, f, indent=4)

    return save
