"""Data loading: engine catalog and problem input files."""
import json
import os
from typing import Dict, List, Optional, Tuple

from ..engine import Engine
from ..optimization.problem import Constraints, Problem
from ..optimization.uncertainty import Uncertainty
from ..units import Mass, Velocity
from .config import CONFIG, logger

ENGINE_DATA_FILE = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data", "engines.json")

MAX_SUGGESTIONS = 3
MAX_SUGGESTION_SCORE = 6


class UnknownEngineError(KeyError):
    """Engine name not in the catalog."""

    def __init__(self, name: str, suggestions: List[str]):
        self.name = name
        self.suggestions = suggestions
        message = f"Unknown engine '{name}'"
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        super().__init__(message)

    def __str__(self):
        return self.args[0]


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        current = [i]
        for j, cb in enumerate(b, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


class EngineDatabase:
    """Read-only catalog of engines keyed by case-insensitive name."""

    def __init__(self, engines: List[Engine]):
        self._engines: Dict[str, Engine] = {}
        for engine in engines:
            self._engines[engine.name.lower()] = engine

    @classmethod
    def load_embedded(cls) -> 'EngineDatabase':
        return cls.load_from_file(ENGINE_DATA_FILE)

    @classmethod
    def load_from_file(cls, filename: str) -> 'EngineDatabase':
        try:
            with open(filename, 'r') as f:
                data = json.load(f)
            engines = [Engine.from_dict(record) for record in data['engines']]
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Error loading engine data from {filename}: {e}")
            raise
        logger.debug(f"Loaded {len(engines)} engines from {filename}")
        return cls(engines)

    def __len__(self):
        return len(self._engines)

    def __contains__(self, name: str):
        return name.lower() in self._engines

    def get(self, name: str) -> Optional[Engine]:
        return self._engines.get(name.strip().lower())

    def require(self, name: str) -> Engine:
        """Like ``get`` but raises UnknownEngineError with suggestions."""
        engine = self.get(name)
        if engine is None:
            raise UnknownEngineError(name, self.suggest(name))
        return engine

    def list(self) -> List[Engine]:
        return sorted(self._engines.values(), key=lambda e: e.name)

    def names(self) -> List[str]:
        return [engine.name for engine in self.list()]

    def suggest(self, query: str) -> List[str]:
        """Up to three engine names resembling ``query``, closest first.

        Names starting with the query rank first, then names containing
        it, then names the query starts with, then the rest by edit
        distance. Ties keep catalog order. Poor matches are dropped.
        """
        key = query.strip().lower()
        scored = []
        for engine in self._engines.values():
            name = engine.name.lower()
            if name.startswith(key):
                score = 0
            elif key in name:
                score = 1
            elif key.startswith(name):
                score = 2
            else:
                score = levenshtein(key, name) + 3
            if score <= MAX_SUGGESTION_SCORE:
                scored.append((score, engine.name))
        scored.sort(key=lambda item: item[0])
        return [name for _, name in scored[:MAX_SUGGESTIONS]]


def load_input_data(filename: str, database: Optional[EngineDatabase] = None) -> Tuple[Problem, dict]:
    """Load an optimization problem from a JSON file.

    Expected layout::

        {
            "parameters": {"payload_kg": 5000, "target_delta_v_mps": 9000,
                           "engines": ["Raptor-2"], "stage_count": 2},
            "constraints": {"min_liftoff_twr": 1.3},
            "optimizer": "auto",
            "monte_carlo": {"iterations": 500, "uncertainty": "default", "seed": 42}
        }

    Returns:
        tuple: (problem, options) where options holds the optimizer choice
        and, when present, Monte Carlo settings with an ``Uncertainty``
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading input data: {e}")
        raise

    database = database or EngineDatabase.load_embedded()
    parameters = data['parameters']
    engines = [database.require(name) for name in parameters['engines']]

    constraint_values = dict(CONFIG["constraints"])
    constraint_values.update(data.get('constraints', {}))

    problem = Problem(
        payload=Mass(float(parameters['payload_kg'])),
        target_delta_v=Velocity(float(parameters['target_delta_v_mps'])),
        engines=engines,
        constraints=Constraints.from_dict(constraint_values),
        stage_count=parameters.get('stage_count'),
    )

    options = {'optimizer': data.get('optimizer', 'auto')}
    monte_carlo = data.get('monte_carlo')
    if monte_carlo is not None:
        options['monte_carlo'] = {
            'iterations': int(monte_carlo.get('iterations', CONFIG["optimization"]["monte_carlo"]["iterations"])),
            'seed': monte_carlo.get('seed'),
            'uncertainty': _parse_uncertainty(monte_carlo.get('uncertainty', 'default')),
        }
    return problem, options


def _parse_uncertainty(value) -> Uncertainty:
    if isinstance(value, str):
        return Uncertainty.from_level(value)
    return Uncertainty(
        isp_percent=float(value.get('isp_percent', 0.0)),
        thrust_percent=float(value.get('thrust_percent', 0.0)),
        structural_percent=float(value.get('structural_percent', 0.0)),
    )
