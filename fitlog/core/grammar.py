# fitlog/core/grammar.py
"""
Grammaire des arguments de commande, format `lettre/valeur`.

    parse_create("n/Leg Day d/23/10/25 t/1900", ctx)
    -> Ok(CreateArgs(name="Leg Day", date=2025-10-23, time=19:00, strict=True))

Deux étapes :
  1. `tokenize()` découpe la chaîne en jetons plats (flag, bornes de la valeur) ;
  2. `parse()` valide ces jetons contre une `Grammar` déclarative
     (cardinalité, ordre relatif, forme de chaque valeur).

Chaque étape renvoie un `Ok` ou un `Err` (INVALID_ARGUMENT) : jamais d'exception,
et exactement un résultat par entrée.
"""
from __future__ import annotations
import re
from datetime import date, time
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from ..config import MAX_NAME_LEN, MAX_REPS, MAX_USERNAME_LEN, MAX_WEIGHT_KG, MAX_YEAR
from .models import NAME_ALLOWED, YearMonth
from .results import Err, Ok, Result, invalid
from .tagger import Modality, MuscleGroup, category_names

# Un flag = une lettre (ou un des marqueurs longs) suivie de "/", en début de
# chaîne ou après un blanc. "Push/Pull" n'est donc pas un flag.
FLAG_RE = re.compile(r"(?:^|(?<=\s))(tag|id|ym|pg|[A-Za-z])/")
NAME_ILLEGAL = re.compile(r"[^A-Za-z0-9 _-]")
DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{2})$")
TIME_RE = re.compile(r"^(\d{2})(\d{2})$")
REPS_RE = re.compile(r"^\d{1,4}$")
INT_RE = re.compile(r"^\d+$")
YM_RE = re.compile(r"^(\d{1,2})/(\d{2}|\d{4})$")
WEIGHT_RE = re.compile(r"^\d{1,3}(\.\d+)?$")


class ParseContext(NamedTuple):
    today: date
    first_month: YearMonth          # borne basse : mois du premier lancement
    max_year: int = MAX_YEAR


class Token(NamedTuple):
    flag: str
    start: int          # position du flag
    value_start: int    # juste après "/"
    value_end: int      # début du flag suivant, ou fin de chaîne
    raw: str            # valeur brute (non trimée)


Shape = Callable[[str, ParseContext], Result]


class FlagRule(NamedTuple):
    flag: str
    label: str
    shape: Shape
    required: bool = True
    example: str = ""


class Grammar(NamedTuple):
    command: str
    usage: str
    rules: Tuple[FlagRule, ...]
    order: Tuple[str, ...] = ()
    exclusive: Tuple[Tuple[str, str], ...] = ()

    @property
    def flags(self) -> Tuple[str, ...]:
        return tuple(r.flag for r in self.rules)


# ──────────────────────────────────────────────────────────────────────────────
# Tokenizer
# ──────────────────────────────────────────────────────────────────────────────
def tokenize(text: str) -> List[Token]:
    marks = list(FLAG_RE.finditer(text))
    tokens: List[Token] = []
    for i, m in enumerate(marks):
        value_start = m.end()
        value_end = marks[i + 1].start() if i + 1 < len(marks) else len(text)
        tokens.append(Token(m.group(1), m.start(), value_start, value_end, text[value_start:value_end]))
    return tokens


# ──────────────────────────────────────────────────────────────────────────────
# Formes de valeurs
# ──────────────────────────────────────────────────────────────────────────────
def name_shape(label: str, max_len: int = MAX_NAME_LEN) -> Shape:
    def check(value: str, ctx: ParseContext) -> Result:
        if len(value) > max_len:
            return invalid(f"{label} too long ({len(value)}). Max {max_len} characters.")
        if not NAME_ALLOWED.match(value):
            bad = NAME_ILLEGAL.search(value)
            shown = bad.group(0) if bad else value
            return invalid(
                f"“{shown}” is not allowed in the {label.lower()}. "
                "Allowed: letters, digits, spaces, -, _."
            )
        return Ok(value)
    return check


def _within_bounds(ym: YearMonth, ctx: ParseContext) -> Optional[Err]:
    if ym < ctx.first_month:
        return invalid(f"{ym} is before {ctx.first_month}, the month you started logging.")
    if ym.year > ctx.max_year:
        return invalid(f"Year must not be after {ctx.max_year}.")
    return None


def calendar_date_shape(value: str, ctx: ParseContext) -> Result:
    """DD/MM/YY -> date(2000+YY, MM, DD), sans borne basse (profil)."""
    m = DATE_RE.match(value)
    if not m:
        return invalid("Invalid date. Use d/DD/MM/YY (e.g., d/23/10/25).")
    dd, mm, yy = (int(g) for g in m.groups())
    if not 1 <= mm <= 12:
        return invalid("Month must be between 1 and 12.")
    try:
        d = date(2000 + yy, mm, dd)
    except ValueError:
        return invalid(f"Invalid date: {value} does not exist.")
    if d.year > ctx.max_year:
        return invalid(f"Year must not be after {ctx.max_year}.")
    return Ok(d)


def date_shape(value: str, ctx: ParseContext) -> Result:
    checked = calendar_date_shape(value, ctx)
    if isinstance(checked, Err):
        return checked
    return _within_bounds(YearMonth.of(checked.value), ctx) or checked


def time_shape(value: str, ctx: ParseContext) -> Result:
    m = TIME_RE.match(value)
    if not m or int(m.group(1)) > 23 or int(m.group(2)) > 59:
        return invalid("Invalid time. Use t/HHmm (e.g., t/1905).")
    return Ok(time(int(m.group(1)), int(m.group(2))))


def reps_shape(value: str, ctx: ParseContext) -> Result:
    if not REPS_RE.match(value) or not 1 <= int(value) <= MAX_REPS:
        return invalid(f"Invalid reps: reps must be 1..{MAX_REPS}. Use a whole number, e.g. r/12.")
    return Ok(int(value))


def positive_int_shape(label: str, example: str) -> Shape:
    def check(value: str, ctx: ParseContext) -> Result:
        if not INT_RE.match(value) or int(value) <= 0:
            return invalid(f"{label} must be a positive integer, e.g. {example}.")
        return Ok(int(value))
    return check


def month_shape(value: str, ctx: ParseContext) -> Result:
    if not INT_RE.match(value) or len(value) > 2:
        return invalid("Month after m/ must be an integer 1..12, e.g. m/10.")
    mm = int(value)
    if not 1 <= mm <= 12:
        return invalid("Month must be between 1 and 12.")
    ym = YearMonth(ctx.today.year, mm)
    return _within_bounds(ym, ctx) or Ok(ym)


def year_month_shape(value: str, ctx: ParseContext) -> Result:
    m = YM_RE.match(value)
    if not m:
        return invalid("Use ym/<MM>/<YY>, e.g. ym/10/25.")
    mm, yy = int(m.group(1)), m.group(2)
    if not 1 <= mm <= 12:
        return invalid("Month must be between 1 and 12.")
    year = 2000 + int(yy) if len(yy) == 2 else int(yy)
    ym = YearMonth(year, mm)
    return _within_bounds(ym, ctx) or Ok(ym)


def weight_shape(value: str, ctx: ParseContext) -> Result:
    if not WEIGHT_RE.match(value) or not 0 < float(value) <= MAX_WEIGHT_KG:
        return invalid(f"Invalid weight. Enter a number between 0 and {MAX_WEIGHT_KG:g} (e.g., 65 or 65.5).")
    return Ok(float(value))


def lowered_name_shape(label: str) -> Shape:
    def check(value: str, ctx: ParseContext) -> Result:
        checked = name_shape(label)(value, ctx)
        return Ok(checked.value.lower()) if isinstance(checked, Ok) else checked
    return check


def choice_shape(label: str, choices: Sequence[str]) -> Shape:
    def check(value: str, ctx: ParseContext) -> Result:
        key = value.upper().replace("-", "_")
        if key not in choices:
            return invalid(f"Unknown {label} '{value}'. Choose one of: {', '.join(choices)}.")
        return Ok(key)
    return check


# ──────────────────────────────────────────────────────────────────────────────
# Moteur
# ──────────────────────────────────────────────────────────────────────────────
def _fmt_flags(flags: Sequence[str]) -> str:
    return " then ".join(f"{f}/" for f in flags)


def parse(grammar: Grammar, text: Optional[str], ctx: ParseContext) -> Result:
    """Valide `text` contre `grammar` ; Ok({flag: valeur typée | None}) ou un seul Err."""
    s = (text or "").strip()
    usage = grammar.usage
    rules = {r.flag: r for r in grammar.rules}

    if not s and any(r.required for r in grammar.rules):
        return invalid(f"Missing information. Use: {usage}", usage)

    tokens = tokenize(s)
    known = [t for t in tokens if t.flag in rules]
    by_flag: Dict[str, Token] = {}

    # 1. cardinalités
    for rule in grammar.rules:
        found = [t for t in known if t.flag == rule.flag]
        if rule.required and len(found) != 1:
            return invalid(f"Please provide exactly one {rule.flag}/.", usage)
        if not rule.required and len(found) > 1:
            return invalid(f"Too many {rule.flag}/ flags.", usage)
        if found:
            by_flag[rule.flag] = found[0]
    for a, b in grammar.exclusive:
        if a in by_flag and b in by_flag:
            return invalid(f"Cannot combine {a}/ with {b}/.", usage)

    # 2. ordre relatif
    present = [f for f in grammar.order if f in by_flag]
    for a, b in zip(present, present[1:]):
        if by_flag[a].start > by_flag[b].start:
            return invalid(f"Order must be {_fmt_flags(grammar.order)}.", usage)

    # 3-4. extraction puis forme
    values: Dict[str, object] = {}
    for rule in grammar.rules:
        tok = by_flag.get(rule.flag)
        value = tok.raw.strip() if tok else ""
        if not value:
            if tok is not None and rule.required:
                return invalid(f"{rule.label} missing after {rule.flag}/. Example: {rule.example}", usage)
            values[rule.flag] = None
            continue
        if tok.raw[0].isspace():
            return invalid(
                f"Remove the space after {rule.flag}/. Example: {rule.example} (not {rule.flag}/ {value})",
                usage,
            )
        checked = rule.shape(value, ctx)
        if isinstance(checked, Err):
            return checked.with_usage(usage)
        values[rule.flag] = checked.value

    # 5. texte parasite avant le premier flag / après le dernier flag reconnu
    if not tokens:
        return invalid(f"Unexpected text '{s}'. Use: {usage}", usage) if s else Ok(values)
    if tokens[0].start > 0:
        return invalid(f"Unexpected text before {tokens[0].flag}/. Use: {usage}", usage)
    if known:
        last = max(known, key=lambda t: t.start)
        if s[last.value_end:].strip():
            return invalid(f"Unexpected text after {rules[last.flag].label.lower()}. Use exactly: {usage}", usage)

    # 6. flags hors grammaire
    for tok in tokens:
        if tok.flag not in rules:
            return invalid(f"Unsupported flag \"{tok.flag}/\" found. Use: {usage}", usage)

    return Ok(values)


# ──────────────────────────────────────────────────────────────────────────────
# Table des commandes
# ──────────────────────────────────────────────────────────────────────────────
MONTH_HINT = "[m/MM | ym/MM/YY]"

_NAME = FlagRule("n", "Workout name", name_shape("Workout name"), example="n/Leg Day")
_DATE = FlagRule("d", "Date", date_shape, example="d/23/10/25")
_TIME = FlagRule("t", "Time", time_shape, example="t/1905")
_REPS = FlagRule("r", "Reps", reps_shape, example="r/12")
_ID = FlagRule("id", "Workout ID", positive_int_shape("Workout ID", "id/3"), example="id/3")
_M = FlagRule("m", "Month", month_shape, required=False, example="m/10")
_YM = FlagRule("ym", "Month", year_month_shape, required=False, example="ym/10/25")
_WEIGHT = FlagRule("w", "Weight", weight_shape, example="w/65.5")
_DAY = FlagRule("d", "Date", calendar_date_shape, required=False, example="d/23/10/25")
_KEYWORD = FlagRule("k", "Keyword", lowered_name_shape("Keyword"), example="k/spin")

CREATE_STRICT = Grammar(
    "create_workout",
    "/create_workout n/NAME d/DD/MM/YY t/HHmm",
    (_NAME, _DATE, _TIME),
    order=("n", "d", "t"),
)
CREATE_FLEX = Grammar("create_workout", "/create_workout n/NAME [d/DD/MM/YY t/HHmm]", (_NAME,))
ADD_EXERCISE = Grammar(
    "add_exercise",
    "/add_exercise n/NAME r/REPS",
    (FlagRule("n", "Exercise name", name_shape("Exercise name"), example="n/Squat"), _REPS),
    order=("n", "r"),
)
ADD_SET = Grammar("add_set", "/add_set r/REPS", (_REPS,))
END = Grammar(
    "end_workout",
    "/end_workout [d/DD/MM/YY] [t/HHmm]",
    (_DATE._replace(required=False), _TIME._replace(required=False)),
    order=("d", "t"),
)
DELETE = Grammar("del_workout", f"/del_workout id/ID {MONTH_HINT}", (_ID, _M, _YM), exclusive=(("m", "ym"),))
OPEN = Grammar("open", f"/open id/ID {MONTH_HINT}", (_ID, _M, _YM), exclusive=(("m", "ym"),))
VIEW_LOG = Grammar(
    "view_log",
    f"/view_log [pg/PAGE] {MONTH_HINT}",
    (FlagRule("pg", "Page", positive_int_shape("Page", "pg/2"), required=False, example="pg/2"), _M, _YM),
    exclusive=(("m", "ym"),),
)
OVERRIDE_TAG = Grammar(
    "override_workout_tag",
    f"/override_workout_tag id/ID tag/TAG {MONTH_HINT}",
    (_ID, FlagRule("tag", "Tag", lowered_name_shape("Tag"), example="tag/push"), _M, _YM),
    exclusive=(("m", "ym"),),
)
ADD_WEIGHT = Grammar("add_weight", "/add_weight w/KG [d/DD/MM/YY]", (_WEIGHT, _DAY), order=("w", "d"))
SET_GOAL = Grammar("set_goal", "/set_goal w/KG [d/DD/MM/YY]", (_WEIGHT, _DAY), order=("w", "d"))
MY_NAME = Grammar(
    "my_name",
    "/my_name n/NAME",
    (FlagRule("n", "Name", name_shape("Name", MAX_USERNAME_LEN), example="n/Alex"),),
)
ADD_MODALITY_TAG = Grammar(
    "add_modality_tag",
    f"/add_modality_tag m/{'|'.join(category_names(Modality))} k/KEYWORD",
    (FlagRule("m", "Modality", choice_shape("modality", category_names(Modality)), example="m/CARDIO"), _KEYWORD),
    order=("m", "k"),
)
ADD_MUSCLE_TAG = Grammar(
    "add_muscle_tag",
    "/add_muscle_tag m/MUSCLE_GROUP k/KEYWORD",
    (FlagRule("m", "Muscle group", choice_shape("muscle group", category_names(MuscleGroup)), example="m/LEGS"),
     _KEYWORD),
    order=("m", "k"),
)


# ──────────────────────────────────────────────────────────────────────────────
# Résultats typés
# ──────────────────────────────────────────────────────────────────────────────
class CreateArgs(NamedTuple):
    name: str
    date: Optional[date]
    time: Optional[time]
    strict: bool


class ExerciseArgs(NamedTuple):
    name: str
    reps: int


class SetArgs(NamedTuple):
    reps: int


class EndArgs(NamedTuple):
    date: Optional[date]
    time: Optional[time]


class PickArgs(NamedTuple):
    index: int
    month: YearMonth


class ViewLogArgs(NamedTuple):
    page: int
    month: YearMonth


class OverrideTagArgs(NamedTuple):
    index: int
    tag: str
    month: YearMonth


class WeightArgs(NamedTuple):
    weight: float
    date: Optional[date]


class NameArgs(NamedTuple):
    name: str


class KeywordArgs(NamedTuple):
    category: str
    keyword: str


def _build(grammar: Grammar, text: Optional[str], ctx: ParseContext, make: Callable[[dict], object]) -> Result:
    parsed = parse(grammar, text, ctx)
    return Ok(make(parsed.value)) if isinstance(parsed, Ok) else parsed


def _month(v: dict, ctx: ParseContext) -> YearMonth:
    # défaut : mois calendaire courant
    return v.get("m") or v.get("ym") or YearMonth.of(ctx.today)


def parse_create(text: Optional[str], ctx: ParseContext) -> Result:
    # d/ ou t/ présent -> forme stricte (n/ d/ t/ obligatoires)
    strict = any(t.flag in ("d", "t") for t in tokenize((text or "").strip()))
    grammar = CREATE_STRICT if strict else CREATE_FLEX
    return _build(grammar, text, ctx, lambda v: CreateArgs(v["n"], v.get("d"), v.get("t"), strict))


def parse_add_exercise(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(ADD_EXERCISE, text, ctx, lambda v: ExerciseArgs(v["n"], v["r"]))


def parse_add_set(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(ADD_SET, text, ctx, lambda v: SetArgs(v["r"]))


def parse_end(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(END, text, ctx, lambda v: EndArgs(v["d"], v["t"]))


def parse_delete(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(DELETE, text, ctx, lambda v: PickArgs(v["id"], _month(v, ctx)))


def parse_open(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(OPEN, text, ctx, lambda v: PickArgs(v["id"], _month(v, ctx)))


def parse_view_log(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(VIEW_LOG, text, ctx, lambda v: ViewLogArgs(v["pg"] or 1, _month(v, ctx)))


def parse_override_tag(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(OVERRIDE_TAG, text, ctx, lambda v: OverrideTagArgs(v["id"], v["tag"], _month(v, ctx)))


def parse_add_weight(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(ADD_WEIGHT, text, ctx, lambda v: WeightArgs(v["w"], v["d"]))


def parse_set_goal(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(SET_GOAL, text, ctx, lambda v: WeightArgs(v["w"], v["d"]))


def parse_my_name(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(MY_NAME, text, ctx, lambda v: NameArgs(v["n"]))


def parse_add_modality_tag(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(ADD_MODALITY_TAG, text, ctx, lambda v: KeywordArgs(v["m"], v["k"]))


def parse_add_muscle_tag(text: Optional[str], ctx: ParseContext) -> Result:
    return _build(ADD_MUSCLE_TAG, text, ctx, lambda v: KeywordArgs(v["m"], v["k"]))


GRAMMARS: Tuple[Grammar, ...] = (
    CREATE_STRICT, ADD_EXERCISE, ADD_SET, END, DELETE, OPEN, VIEW_LOG, OVERRIDE_TAG,
    ADD_WEIGHT, SET_GOAL, MY_NAME, ADD_MODALITY_TAG, ADD_MUSCLE_TAG,
)
