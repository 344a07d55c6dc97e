INGREDIENT_ANALYSIS_PROMPT = """Please analyze this image and look for ingredient lists. For each ingredient you find:
1. Extract the ingredient name exactly as written
2. Provide a simple, easy-to-understand explanation of what it is
3. If it's a chemical/scientific name, translate it to common terms

Format your response as JSON only (no markdown):
{
  "ingredients": [
    {
      "name": "ingredient name",
      "explanation": "simple explanation"
    }
  ]
}

If no ingredients found:
{
  "ingredients": [],
  "message": "No ingredient list found"
}"""
