"""Static Surah reference catalog.

Each Surah carries the Juz numbers it spans. Membership is derived from the
standard Juz start positions, so a long Surah such as Al-Baqarah belongs to
Juz 1, 2 and 3, and a Juz may contain many short Surahs.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

JUZ_COUNT = 30
SURAH_COUNT = 114


@dataclass(frozen=True)
class Surah:
    number: int
    name: str
    arabic_name: str
    ayah_count: int
    juz: Tuple[int, ...]


# (surah, ayah) at which each Juz begins, Juz 1..30
JUZ_STARTS: List[Tuple[int, int]] = [
    (1, 1), (2, 142), (2, 253), (3, 93), (4, 24),
    (4, 148), (5, 82), (6, 111), (7, 88), (8, 41),
    (9, 93), (11, 6), (12, 53), (15, 1), (17, 1),
    (18, 75), (21, 1), (23, 1), (25, 21), (27, 56),
    (29, 46), (33, 31), (36, 28), (39, 32), (41, 47),
    (46, 1), (51, 31), (58, 1), (67, 1), (78, 1),
]

_SURAH_METADATA: List[Tuple[int, str, str, int]] = [
    (1, "Al-Fatiha", "الفاتحة", 7),
    (2, "Al-Baqarah", "البقرة", 286),
    (3, "Aal-Imran", "آل عمران", 200),
    (4, "An-Nisa", "النساء", 176),
    (5, "Al-Ma'idah", "المائدة", 120),
    (6, "Al-An'am", "الأنعام", 165),
    (7, "Al-A'raf", "الأعراف", 206),
    (8, "Al-Anfal", "الأنفال", 75),
    (9, "At-Tawbah", "التوبة", 129),
    (10, "Yunus", "يونس", 109),
    (11, "Hud", "هود", 123),
    (12, "Yusuf", "يوسف", 111),
    (13, "Ar-Ra'd", "الرعد", 43),
    (14, "Ibrahim", "إبراهيم", 52),
    (15, "Al-Hijr", "الحجر", 99),
    (16, "An-Nahl", "النحل", 128),
    (17, "Al-Isra", "الإسراء", 111),
    (18, "Al-Kahf", "الكهف", 110),
    (19, "Maryam", "مريم", 98),
    (20, "Ta-Ha", "طه", 135),
    (21, "Al-Anbiya", "الأنبياء", 112),
    (22, "Al-Hajj", "الحج", 78),
    (23, "Al-Mu'minun", "المؤمنون", 118),
    (24, "An-Nur", "النور", 64),
    (25, "Al-Furqan", "الفرقان", 77),
    (26, "Ash-Shu'ara", "الشعراء", 227),
    (27, "An-Naml", "النمل", 93),
    (28, "Al-Qasas", "القصص", 88),
    (29, "Al-Ankabut", "العنكبوت", 69),
    (30, "Ar-Rum", "الروم", 60),
    (31, "Luqman", "لقمان", 34),
    (32, "As-Sajdah", "السجدة", 30),
    (33, "Al-Ahzab", "الأحزاب", 73),
    (34, "Saba", "سبأ", 54),
    (35, "Fatir", "فاطر", 45),
    (36, "Ya-Sin", "يس", 83),
    (37, "As-Saffat", "الصافات", 182),
    (38, "Sad", "ص", 88),
    (39, "Az-Zumar", "الزمر", 75),
    (40, "Ghafir", "غافر", 85),
    (41, "Fussilat", "فصلت", 54),
    (42, "Ash-Shuraa", "الشورى", 53),
    (43, "Az-Zukhruf", "الزخرف", 89),
    (44, "Ad-Dukhan", "الدخان", 59),
    (45, "Al-Jathiyah", "الجاثية", 37),
    (46, "Al-Ahqaf", "الأحقاف", 35),
    (47, "Muhammad", "محمد", 38),
    (48, "Al-Fath", "الفتح", 29),
    (49, "Al-Hujurat", "الحجرات", 18),
    (50, "Qaf", "ق", 45),
    (51, "Adh-Dhariyat", "الذاريات", 60),
    (52, "At-Tur", "الطور", 49),
    (53, "An-Najm", "النجم", 62),
    (54, "Al-Qamar", "القمر", 55),
    (55, "Ar-Rahman", "الرحمن", 78),
    (56, "Al-Waqi'ah", "الواقعة", 96),
    (57, "Al-Hadid", "الحديد", 29),
    (58, "Al-Mujadila", "المجادلة", 22),
    (59, "Al-Hashr", "الحشر", 24),
    (60, "Al-Mumtahanah", "الممتحنة", 13),
    (61, "As-Saff", "الصف", 14),
    (62, "Al-Jumu'ah", "الجمعة", 11),
    (63, "Al-Munafiqun", "المنافقون", 11),
    (64, "At-Taghabun", "التغابن", 18),
    (65, "At-Talaq", "الطلاق", 12),
    (66, "At-Tahrim", "التحريم", 12),
    (67, "Al-Mulk", "الملك", 30),
    (68, "Al-Qalam", "القلم", 52),
    (69, "Al-Haqqah", "الحاقة", 52),
    (70, "Al-Ma'arij", "المعارج", 44),
    (71, "Nuh", "نوح", 28),
    (72, "Al-Jinn", "الجن", 28),
    (73, "Al-Muzzammil", "المزمل", 20),
    (74, "Al-Muddathir", "المدثر", 56),
    (75, "Al-Qiyamah", "القيامة", 40),
    (76, "Al-Insan", "الإنسان", 31),
    (77, "Al-Mursalat", "المرسلات", 50),
    (78, "An-Naba", "النبأ", 40),
    (79, "An-Nazi'at", "النازعات", 46),
    (80, "Abasa", "عبس", 42),
    (81, "At-Takwir", "التكوير", 29),
    (82, "Al-Infitar", "الانفطار", 19),
    (83, "Al-Mutaffifin", "المطففين", 36),
    (84, "Al-Inshiqaq", "الانشقاق", 25),
    (85, "Al-Buruj", "البروج", 22),
    (86, "At-Tariq", "الطارق", 17),
    (87, "Al-A'la", "الأعلى", 19),
    (88, "Al-Ghashiyah", "الغاشية", 26),
    (89, "Al-Fajr", "الفجر", 30),
    (90, "Al-Balad", "البلد", 20),
    (91, "Ash-Shams", "الشمس", 15),
    (92, "Al-Layl", "الليل", 21),
    (93, "Ad-Duha", "الضحى", 11),
    (94, "Ash-Sharh", "الشرح", 8),
    (95, "At-Tin", "التين", 8),
    (96, "Al-Alaq", "العلق", 19),
    (97, "Al-Qadr", "القدر", 5),
    (98, "Al-Bayyinah", "البينة", 8),
    (99, "Az-Zalzalah", "الزلزلة", 8),
    (100, "Al-Adiyat", "العاديات", 11),
    (101, "Al-Qari'ah", "القارعة", 11),
    (102, "At-Takathur", "التكاثر", 8),
    (103, "Al-Asr", "العصر", 3),
    (104, "Al-Humazah", "الهمزة", 9),
    (105, "Al-Fil", "الفيل", 5),
    (106, "Quraysh", "قريش", 4),
    (107, "Al-Ma'un", "الماعون", 7),
    (108, "Al-Kawthar", "الكوثر", 3),
    (109, "Al-Kafirun", "الكافرون", 6),
    (110, "An-Nasr", "النصر", 3),
    (111, "Al-Masad", "المسد", 5),
    (112, "Al-Ikhlas", "الإخلاص", 4),
    (113, "Al-Falaq", "الفلق", 5),
    (114, "An-Nas", "الناس", 6),
]


def _juz_for(number: int, ayah_count: int) -> Tuple[int, ...]:
    first, last = (number, 1), (number, ayah_count)
    spans = []
    for index, start in enumerate(JUZ_STARTS):
        end = JUZ_STARTS[index + 1] if index + 1 < JUZ_COUNT else None
        if start <= last and (end is None or first < end):
            spans.append(index + 1)
    return tuple(spans)


SURAHS: List[Surah] = [
    Surah(number=number, name=name, arabic_name=arabic, ayah_count=count,
          juz=_juz_for(number, count))
    for number, name, arabic, count in _SURAH_METADATA
]

_BY_NUMBER: Dict[int, Surah] = {surah.number: surah for surah in SURAHS}


def get_surah(number: int) -> Surah:
    """Return the Surah with the given number; KeyError if out of range."""
    return _BY_NUMBER[number]


def surahs_in_juz(juz_number: int) -> List[Surah]:
    return [surah for surah in SURAHS if juz_number in surah.juz]


def surahs_in_any_juz(juz_numbers) -> List[Surah]:
    """Surahs touching at least one of the given Juz, in catalog order."""
    wanted = set(juz_numbers)
    return [surah for surah in SURAHS if wanted.intersection(surah.juz)]


def is_valid_juz(number: int) -> bool:
    return 1 <= number <= JUZ_COUNT
