# tests/test_datasets.py
import pytest

from src.services.datasets import (
    DatasetService,
    analyze_columns,
    build_arrays,
    cap_rows,
    coerce_value,
    parse_csv,
    positional_split,
)
from src.services.errors import MLServiceError, NotFoundError, ValidationError

SAMPLE_CSV = b"sepal_length,sepal_width,species\n5.1,3.5,setosa\n4.9,,setosa\n6.3,2.9,virginica\n"


class TestCoerceValue:

    def test_numeric_strings_become_floats(self):
        assert coerce_value("5.1") == 5.1
        assert coerce_value(" 42 ") == 42.0
        assert coerce_value("-1e3") == -1000.0

    def test_non_numeric_values_are_kept(self):
        assert coerce_value("setosa") == "setosa"
        assert coerce_value("") == ""
        assert coerce_value(None) is None

    def test_non_finite_strings_are_kept(self):
        assert coerce_value("nan") == "nan"
        assert coerce_value("inf") == "inf"

    def test_numbers_pass_through(self):
        assert coerce_value(3) == 3
        assert coerce_value(2.5) == 2.5


class TestCsvParsing:

    def test_parse_keeps_raw_strings(self):
        columns, rows = parse_csv(SAMPLE_CSV)

        assert columns == ["sepal_length", "sepal_width", "species"]
        assert len(rows) == 3
        assert rows[0] == {"sepal_length": "5.1", "sepal_width": "3.5", "species": "setosa"}
        assert rows[1]["sepal_width"] == ""

    def test_empty_file(self):
        assert parse_csv(b"") == ([], [])

    def test_header_only(self):
        columns, rows = parse_csv(b"a,b\n")
        assert columns == ["a", "b"]
        assert rows == []

    def test_column_analysis(self):
        columns, rows = parse_csv(SAMPLE_CSV)
        info = {column["name"]: column for column in analyze_columns(columns, rows)}

        assert info["species"] == {
            "name": "species", "type": "string", "uniqueValues": 2, "missingValues": 0
        }
        assert info["sepal_width"]["missingValues"] == 1
        assert info["sepal_width"]["uniqueValues"] == 2


class TestDocumentSizeCap:

    @pytest.fixture
    def rows(self):
        # each row serializes to 18 bytes; 1000 rows plus separators is 19001 bytes
        return [{"v": "x" * 10} for _ in range(1000)]

    def test_small_payload_is_untouched(self, rows):
        assert len(cap_rows(rows, max_bytes=19001, min_rows=100)) == 1000

    def test_oversized_payload_keeps_prefix(self, rows):
        capped = cap_rows(rows, max_bytes=9500, min_rows=100)
        assert len(capped) == 500
        assert capped == rows[:500]

    def test_minimum_rows_are_always_kept(self, rows):
        assert len(cap_rows(rows, max_bytes=10, min_rows=100)) == 100


class TestSplitting:

    def test_positional_split_hundred_rows(self):
        X = [[i] for i in range(100)]
        y = list(range(100))

        split = positional_split(X, y, 0.2)

        assert split["X_train"] == X[:80]
        assert split["y_test"] == list(range(80, 100))
        assert len(split["X_test"]) == 20

    def test_build_arrays_excludes_target_and_coerces(self):
        rows = [{"a": "1", "b": "x", "t": "0"}, {"a": "", "b": "2.5", "t": "1"}]

        X, y = build_arrays(rows, ["a", "b"], "t")

        assert X == [[1.0, "x"], ["", 2.5]]
        assert y == [0.0, 1.0]


class TestDatasetService:

    @pytest.fixture
    def service(self, store, ml_client, config):
        return DatasetService(store, ml_client, config)

    def test_upload_stores_dataset(self, service):
        dataset = service.upload(
            user="user-1",
            filename="iris.csv",
            content=SAMPLE_CSV,
            target_column="species",
            problem_type="classification",
        )

        assert dataset["_id"]
        assert dataset["name"] == "iris.csv"
        assert dataset["numberOfRows"] == 3
        assert dataset["numberOfColumns"] == 3
        assert dataset["status"] == "ready"
        assert dataset["preprocessingApplied"] is False
        assert len(dataset["data"]) == 3
        assert "storedRows" not in dataset

    def test_upload_rejects_non_csv(self, service):
        with pytest.raises(ValidationError, match="Only CSV"):
            service.upload("user-1", "notes.txt", b"hello", content_type="text/plain",
                           problem_type="classification")

    def test_upload_accepts_csv_content_type(self, service):
        dataset = service.upload("user-1", "export", SAMPLE_CSV, content_type="text/csv",
                                 problem_type="clustering")
        assert dataset["problemType"] == "clustering"

    def test_upload_requires_valid_problem_type(self, service):
        with pytest.raises(ValidationError, match="problemType"):
            service.upload("user-1", "iris.csv", SAMPLE_CSV, problem_type="forecasting")

    def test_upload_rejects_empty_csv(self, service):
        with pytest.raises(ValidationError, match="empty"):
            service.upload("user-1", "empty.csv", b"a,b\n", problem_type="regression")

    def test_upload_rejects_oversized_file(self, service, config):
        config.upload.MAX_FILE_SIZE_MB = 0
        with pytest.raises(ValidationError, match="too large"):
            service.upload("user-1", "iris.csv", SAMPLE_CSV, problem_type="classification")

    def test_upload_rejects_unknown_target(self, service):
        with pytest.raises(ValidationError, match="petal"):
            service.upload("user-1", "iris.csv", SAMPLE_CSV, target_column="petal",
                           problem_type="classification")

    def test_list_omits_row_data(self, service, make_dataset):
        make_dataset(name="first.csv")
        make_dataset(name="second.csv")
        make_dataset(user="someone-else")

        datasets = service.list("user-1")

        assert [dataset["name"] for dataset in datasets] == ["second.csv", "first.csv"]
        assert all("data" not in dataset for dataset in datasets)

    def test_get_other_users_dataset_is_not_found(self, service, make_dataset):
        dataset = make_dataset(user="owner")
        with pytest.raises(NotFoundError):
            service.get("intruder", dataset["_id"])

    def test_update_fields(self, service, make_dataset):
        dataset = make_dataset()

        updated = service.update("user-1", dataset["_id"], {
            "name": "renamed", "targetColumn": "f2", "user": "hijack",
        })

        assert updated["name"] == "renamed"
        assert updated["targetColumn"] == "f2"
        assert updated["user"] == "user-1"

    def test_update_rejects_bad_problem_type(self, service, make_dataset):
        dataset = make_dataset()
        with pytest.raises(ValidationError):
            service.update("user-1", dataset["_id"], {"problemType": "ranking"})

    def test_delete(self, service, make_dataset):
        dataset = make_dataset()
        service.delete("user-1", dataset["_id"])
        with pytest.raises(NotFoundError):
            service.delete("user-1", dataset["_id"])

    @pytest.mark.asyncio
    async def test_preprocess_records_steps(self, service, ml_client, make_dataset):
        dataset = make_dataset()
        ml_client.responses["preprocess"] = {"preprocessing_steps": ["scaled", "encoded"]}

        result = await service.preprocess("user-1", dataset["_id"], {"scale": True})

        payload = ml_client.calls_to("preprocess")[0]
        assert payload["columns"] == ["f1", "f2", "label"]
        assert payload["data"][1] == ["1", "2", "1"]
        assert payload["preprocessing_options"] == {"scale": True}
        assert result["dataset"]["preprocessingApplied"] is True
        assert result["dataset"]["preprocessingSteps"] == ["scaled", "encoded"]
        assert result["dataset"]["status"] == "ready"

    @pytest.mark.asyncio
    async def test_preprocess_failure_marks_dataset_error(self, service, ml_client, store, make_dataset):
        dataset = make_dataset()
        ml_client.responses["preprocess"] = MLServiceError("bad input", status_code=422)

        with pytest.raises(MLServiceError) as excinfo:
            await service.preprocess("user-1", dataset["_id"])

        assert excinfo.value.status_code == 422
        assert service.get("user-1", dataset["_id"])["status"] == "error"
