import os

from library import Library, LoadStatus, SearchField
from book import Book, BookStatus


def dune():
    return Book("Dune", "Herbert", "SciFi", 1965)

def emma():
    return Book("Emma", "Austen", "Romance", 1815)


def test_add_then_find(lib):
    assert lib.list_books() == []

    book = dune()
    lib.add_book(book)

    assert book in lib.find_books("Dune", SearchField.TITLE)
    assert len(lib.list_books()) == 1
    assert lib.list_books()[0].available is True

def test_add_keeps_insertion_order(lib):
    lib.add_book(dune())
    lib.add_book(emma())
    lib.add_book(Book("Dune", "Someone Else", "SciFi", 2000))

    assert [b.author for b in lib.list_books()] == ["Herbert", "Austen", "Someone Else"]

def test_remove_is_soft_delete(lib):
    lib.add_book(dune())
    lib.add_book(emma())

    assert lib.remove_book("Dune") is True

    books = lib.list_books()
    assert len(books) == 2
    assert books[0].title == "Dune"
    assert books[0].available is False
    assert books[0].status is BookStatus.RETIRED
    assert books[1].available is True

    # Still matches by title, so retiring again succeeds
    assert lib.remove_book("Dune") is True
    assert lib.list_books()[0].available is False

def test_remove_only_first_match(lib):
    lib.add_book(dune())
    lib.add_book(Book("Dune", "Other", "SciFi", 1984))

    lib.remove_book("Dune")
    assert [b.available for b in lib.list_books()] == [False, True]

def test_remove_unknown_title(lib):
    lib.add_book(dune())
    before = [b.to_dict() for b in lib.list_books()]

    assert lib.remove_book("no-such-title") is False
    assert [b.to_dict() for b in lib.list_books()] == before

def test_remove_requires_exact_title(lib):
    lib.add_book(dune())
    assert lib.remove_book("dune") is False
    assert lib.remove_book("Dun") is False

def test_restore_book(lib):
    lib.add_book(dune())
    lib.remove_book("Dune")

    assert lib.restore_book("Dune") is True
    assert lib.list_books()[0].available is True
    assert lib.restore_book("Missing") is False

def test_find_by_each_field(lib):
    lib.add_book(dune())
    lib.add_book(emma())
    lib.add_book(Book("Dune Messiah", "Herbert", "SciFi", 1969))

    assert [b.title for b in lib.find_books("Dune")] == ["Dune", "Dune Messiah"]
    assert [b.title for b in lib.find_books("Aust", SearchField.AUTHOR)] == ["Emma"]
    assert [b.title for b in lib.find_books("Sci", SearchField.GENRE)] == ["Dune", "Dune Messiah"]

def test_find_is_case_sensitive(lib):
    lib.add_book(dune())
    assert lib.find_books("dune") == []
    assert lib.find_books("herbert", SearchField.AUTHOR) == []

def test_find_includes_retired_books(lib):
    lib.add_book(dune())
    lib.remove_book("Dune")
    found = lib.find_books("Dune")
    assert len(found) == 1
    assert found[0].available is False

def test_find_returns_a_copy(lib):
    lib.add_book(dune())
    found = lib.find_books("Dune")
    found.clear()
    assert len(lib.list_books()) == 1

def test_sorted_by_year_is_stable_and_does_not_reorder(lib):
    lib.add_book(Book("C", "x", "g", 2000))
    lib.add_book(Book("A", "x", "g", 1990))
    lib.add_book(Book("B", "x", "g", 2000))
    lib.add_book(Book("D", "x", "g", 1990))

    ordered = lib.books_sorted_by_year()
    assert [b.title for b in ordered] == ["A", "D", "C", "B"]
    years = [b.year for b in ordered]
    assert years == sorted(years)

    assert [b.title for b in lib.list_books()] == ["C", "A", "B", "D"]

def test_list_with_genre_filter(lib):
    lib.add_book(dune())
    lib.add_book(emma())
    lib.add_book(Book("Foundation", "Asimov", "SciFi", 1951))
    lib.remove_book("Foundation")

    assert [b.title for b in lib.list_books("SciFi")] == ["Dune", "Foundation"]
    assert lib.list_books("Sci") == []
    assert len(lib.list_books("")) == 3

def test_edit_partial_update(lib):
    lib.add_book(dune())

    updated = lib.edit_book("Dune", author="Frank Herbert")
    assert updated is not None
    assert updated.author == "Frank Herbert"
    assert updated.title == "Dune"
    assert updated.genre == "SciFi"
    assert updated.year == 1965

def test_edit_blank_values_keep_fields(lib):
    lib.add_book(dune())

    updated = lib.edit_book("Dune", new_title="", author="  ", genre=None, year=None)
    assert updated.to_dict() == dune().to_dict()

def test_edit_all_fields(lib):
    lib.add_book(dune())

    lib.edit_book("Dune", new_title="Dune (1965)", author="F. Herbert", genre="Science Fiction", year=1966)
    book = lib.list_books()[0]
    assert (book.title, book.author, book.genre, book.year) == ("Dune (1965)", "F. Herbert", "Science Fiction", 1966)
    assert lib.find_by_title("Dune") is None

def test_edit_not_found(lib):
    assert lib.edit_book("nonexistent", author="Someone") is None

def test_statistics(lib):
    lib.add_book(dune())
    lib.add_book(emma())
    lib.add_book(Book("Foundation", "Asimov", "SciFi", 1951))
    lib.remove_book("Emma")

    assert lib.get_statistics() == {
        "total_books": 3,
        "available_books": 2,
        "retired_books": 1,
        "genres": 2,
    }

def test_save_and_load_scenario(lib, data_file):
    lib.add_book(dune())
    lib.add_book(emma())

    assert lib.save() is True
    with open(data_file, encoding="utf-8") as f:
        assert f.read().splitlines() == ["Dune,Herbert,SciFi,1965,1", "Emma,Austen,Romance,1815,1"]

    fresh = Library(data_file=data_file)
    result = fresh.load()
    assert result.ok
    assert result.count == 2
    assert fresh.list_books() == [dune(), emma()]

    fresh.remove_book("Dune")
    books = fresh.list_books()
    assert books[0].title == "Dune" and books[0].available is False
    assert books[1].to_dict() == emma().to_dict()

def test_round_trip_keeps_retired_flag(lib, data_file):
    lib.add_book(dune())
    lib.add_book(emma())
    lib.add_book(Book("Ulysses", "Joyce", "Modernism", 1922))
    lib.remove_book("Emma")
    lib.save()

    fresh = Library(data_file=data_file)
    fresh.load()
    assert [b.to_dict() for b in fresh.list_books()] == [b.to_dict() for b in lib.list_books()]

def test_save_overwrites_previous_content(lib, data_file):
    lib.add_book(dune())
    lib.add_book(emma())
    lib.save()

    other = Library(data_file=data_file)
    other.add_book(Book("Ulysses", "Joyce", "Modernism", 1922))
    other.save()

    with open(data_file, encoding="utf-8") as f:
        assert f.read() == "Ulysses,Joyce,Modernism,1922,1\n"

def test_save_empty_library_writes_empty_file(lib, data_file):
    assert lib.save() is True
    assert os.path.getsize(data_file) == 0

    result = Library(data_file=data_file).load()
    assert result.status is LoadStatus.LOADED
    assert result.count == 0

def test_save_failure_returns_false(tmp_path):
    lib = Library(data_file=str(tmp_path / "missing-dir" / "library.txt"))
    lib.add_book(dune())
    assert lib.save() is False

def test_save_rejects_delimiter_and_keeps_file(lib, data_file):
    lib.add_book(dune())
    lib.save()

    lib.add_book(Book("Hello, World", "Someone", "Misc", 2001))
    assert lib.save() is False
    with open(data_file, encoding="utf-8") as f:
        assert f.read() == "Dune,Herbert,SciFi,1965,1\n"

def test_load_missing_file_leaves_collection(lib):
    lib.add_book(dune())

    result = lib.load()
    assert result.status is LoadStatus.MISSING
    assert not result.ok
    assert len(lib.list_books()) == 1

def test_load_unreadable_path_is_error(tmp_path):
    # A directory cannot be opened for reading as a text file
    lib = Library(data_file=str(tmp_path))
    lib.add_book(dune())

    result = lib.load()
    assert result.status is LoadStatus.ERROR
    assert len(lib.list_books()) == 1

def test_load_replaces_collection(lib, data_file):
    with open(data_file, "w", encoding="utf-8") as f:
        f.write("Emma,Austen,Romance,1815,0\n")
    lib.add_book(dune())

    lib.load()
    books = lib.list_books()
    assert len(books) == 1
    assert books[0].title == "Emma"
    assert books[0].available is False

def test_load_skips_malformed_lines(lib, data_file):
    with open(data_file, "w", encoding="utf-8") as f:
        f.write("Dune,Herbert,SciFi,1965,1\n")
        f.write("Broken,Line\n")
        f.write("Emma,Austen,Romance,eighteen,1\n")
        f.write("\n")
        f.write("Ulysses,Joyce,Modernism,1922,0\n")

    result = lib.load()
    assert result.ok
    assert result.count == 2
    assert [s.line_no for s in result.skipped] == [2, 3]
    assert [b.title for b in lib.list_books()] == ["Dune", "Ulysses"]

def test_load_skips_undecodable_line(lib, data_file):
    with open(data_file, "wb") as f:
        f.write(b"Dune,Herbert,SciFi,1965,1\n\xff\xfe,bad,Misc,2000,1\nEmma,Austen,Romance,1815,1\n")

    result = lib.load()
    assert result.status is LoadStatus.LOADED
    assert result.count == 2
    assert [s.line_no for s in result.skipped] == [2]
