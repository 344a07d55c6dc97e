import unittest
from src.core.errors import MalformedResponseError
from src.core.models import (
    AnalysisRequest, IngredientList, NoIngredientsFound, parse_analysis_result
)

class TestParseAnalysisResult(unittest.TestCase):
    def test_ingredient_list_keeps_order(self):
        result = parse_analysis_result({
            "ingredients": [
                {"name": "WATER", "explanation": "Plain water."},
                {"name": "CITRIC ACID", "explanation": "A natural acid found in citrus fruit."},
            ]
        })
        self.assertIsInstance(result, IngredientList)
        self.assertEqual([i.name for i in result.ingredients], ["WATER", "CITRIC ACID"])
        self.assertEqual(result.kind, "ingredients")

    def test_not_found_with_message(self):
        result = parse_analysis_result({"ingredients": [], "message": "No ingredient list found"})
        self.assertIsInstance(result, NoIngredientsFound)
        self.assertEqual(result.message, "No ingredient list found")
        self.assertEqual(result.ingredients, [])

    def test_empty_list_without_message(self):
        result = parse_analysis_result({"ingredients": []})
        self.assertIsInstance(result, NoIngredientsFound)
        self.assertIsNone(result.message)

    def test_message_wins_over_ingredients(self):
        result = parse_analysis_result({
            "ingredients": [{"name": "SUGAR", "explanation": "Sugar."}],
            "message": "Label is blurry",
        })
        self.assertIsInstance(result, NoIngredientsFound)
        self.assertEqual(result.message, "Label is blurry")

    def test_blank_message_is_ignored(self):
        result = parse_analysis_result({
            "ingredients": [{"name": "SUGAR", "explanation": "Sugar."}],
            "message": "  ",
        })
        self.assertIsInstance(result, IngredientList)

    def test_rejects_non_object(self):
        with self.assertRaises(MalformedResponseError):
            parse_analysis_result(["WATER"])

    def test_message_without_ingredients(self):
        result = parse_analysis_result({"message": "No ingredient list found"})
        self.assertIsInstance(result, NoIngredientsFound)
        self.assertEqual(result.message, "No ingredient list found")

    def test_null_ingredients(self):
        result = parse_analysis_result({"ingredients": None})
        self.assertIsInstance(result, NoIngredientsFound)
        self.assertIsNone(result.message)

    def test_empty_object(self):
        result = parse_analysis_result({})
        self.assertIsInstance(result, NoIngredientsFound)

    def test_rejects_ingredients_of_wrong_type(self):
        with self.assertRaises(MalformedResponseError):
            parse_analysis_result({"ingredients": "WATER, SUGAR"})

    def test_rejects_incomplete_ingredient(self):
        with self.assertRaises(MalformedResponseError):
            parse_analysis_result({"ingredients": [{"name": "WATER"}]})

class TestAnalysisRequest(unittest.TestCase):
    def test_payload_shape(self):
        request = AnalysisRequest(
            prompt="Describe", image_data="QUJD", media_type="image/png",
            model="test-model", max_tokens=500,
        )
        payload = request.to_payload()

        self.assertEqual(payload["model"], "test-model")
        self.assertEqual(payload["max_tokens"], 500)
        self.assertEqual(len(payload["messages"]), 1)

        content = payload["messages"][0]["content"]
        self.assertEqual([c["type"] for c in content], ["image", "text"])
        self.assertEqual(content[0]["source"], {"type": "base64", "media_type": "image/png", "data": "QUJD"})
        self.assertEqual(content[1]["text"], "Describe")

    def test_request_is_immutable(self):
        request = AnalysisRequest(prompt="p", image_data="d", media_type="image/jpeg", model="m", max_tokens=1)
        with self.assertRaises(Exception):
            request.prompt = "changed"

if __name__ == '__main__':
    unittest.main()
