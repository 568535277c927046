"""도메인 열거형 정의."""

from enum import StrEnum


class QuestCategory(StrEnum):
    """퀘스트 카테고리."""

    HIDDEN_GEM = "hidden_gem"
    SCENIC = "scenic"
    FOOD = "food"
    HISTORY = "history"
    PHOTO_SPOT = "photo_spot"
    WEIRD = "weird"
    NATURE = "nature"
    CULTURE = "culture"


class TransportMode(StrEnum):
    """이동 수단."""

    CAR = "car"
    TRAIN = "train"


class FuelType(StrEnum):
    """차량 연료 종류."""

    PETROL = "petrol"
    DIESEL = "diesel"
    ELECTRIC = "electric"


class HotelType(StrEnum):
    """숙소 유형."""

    HOTEL = "hotel"
    HOSTEL = "hostel"
    GUEST_HOUSE = "guest_house"


class TripPhase(StrEnum):
    """여행 구간."""

    OUTBOUND = "outbound"
    DESTINATION = "destination"
    RETURN = "return"


class DayDistancePolicy(StrEnum):
    """일자별 거리/시간 산정 방식."""

    SEGMENT_SUM = "segment_sum"
    EQUAL_SPLIT = "equal_split"


def parse_categories(values: object) -> list[QuestCategory]:
    """알 수 없는 값은 버리고 카테고리 목록으로 변환합니다. 순서와 중복 제거를 유지합니다."""
    if not isinstance(values, (list, tuple, set, frozenset)):
        return []

    parsed: list[QuestCategory] = []
    for value in values:
        try:
            category = QuestCategory(str(value).strip().lower())
        except ValueError:
            continue
        if category not in parsed:
            parsed.append(category)
    return parsed


def parse_transport_mode(value: object) -> TransportMode:
    """'train'이 아니면 모두 자동차로 취급합니다."""
    return TransportMode.TRAIN if str(value or "").strip().lower() == TransportMode.TRAIN else TransportMode.CAR


def parse_fuel_type(value: object) -> FuelType:
    """알 수 없는 연료는 휘발유로 취급합니다."""
    try:
        return FuelType(str(value or "").strip().lower())
    except ValueError:
        return FuelType.PETROL
